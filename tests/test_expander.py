import asyncio
import functools
import inspect
from pathlib import Path

import pytest

from url_expander import ProcessResult, URLExpander, default_output_path
from url_expander.errors import NavigationError
from url_expander.resolvers import BaseNavigator, BaseProbe


def async_test(coro):
    """Decorator to run async tests with asyncio.run."""

    @functools.wraps(coro)
    def wrapper(*args, **kwargs):
        return asyncio.run(coro(*args, **kwargs))

    return wrapper


class MappingProbe(BaseProbe):
    """Answers from a fixed redirect table."""

    def __init__(self, redirects):
        self.redirects = redirects
        self.calls = []
        self.closed = 0

    async def probe(self, url):
        self.calls.append(url)
        return self.redirects.get(url)

    async def close(self):
        self.closed += 1


class FailingNavigator(BaseNavigator):
    def __init__(self):
        self.calls = []
        self.closed = 0

    async def navigate(self, url, timeout_ms):
        self.calls.append(url)
        raise NavigationError("no browser in tests")

    async def close(self):
        self.closed += 1


REDIRECTS = {
    "https://bit.ly/abc": "https://example.com/a",
    "https://bit.ly/xyz": "https://example.com/b",
}


def make_expander(redirects=REDIRECTS, **kwargs):
    probe = MappingProbe(redirects)
    navigator = FailingNavigator()
    kwargs.setdefault("max_retries", 0)
    expander = URLExpander(navigator=navigator, prober=probe, **kwargs)
    return expander, probe, navigator


@async_test
async def test_markdown_and_bare_shorteners_are_expanded():
    expander, _, _ = make_expander()
    text = "Check [this](https://bit.ly/abc) and https://bit.ly/xyz now"

    out = await expander.process_text(text)

    assert out == "Check [this](https://example.com/a) and https://example.com/b now"


@async_test
async def test_text_without_shorteners_is_unchanged_and_offline():
    expander, probe, navigator = make_expander()
    text = "See [docs](https://docs.python.org/3/) and https://example.org/x\n"

    assert await expander.process_text(text) == text
    assert probe.calls == []
    assert navigator.calls == []


@async_test
async def test_each_unique_url_is_resolved_once():
    expander, probe, _ = make_expander()
    text = "https://bit.ly/abc [a](https://bit.ly/abc) https://bit.ly/abc"

    await expander.process_text(text)

    assert probe.calls == ["https://bit.ly/abc"]


@async_test
async def test_unresolvable_shortener_is_left_alone():
    expander, _, navigator = make_expander()
    text = "broken https://bit.ly/missing link"

    assert await expander.process_text(text) == text
    assert navigator.calls == ["https://bit.ly/missing"]


@async_test
async def test_second_pass_changes_nothing():
    expander, _, _ = make_expander()
    text = "Check [this](https://bit.ly/abc) and https://bit.ly/xyz now"

    once = await expander.process_text(text)
    twice = await expander.process_text(once)

    assert twice == once


@async_test
async def test_expand_url_skips_non_shorteners():
    expander, probe, _ = make_expander()

    assert await expander.expand_url("https://example.org/") == "https://example.org/"
    assert await expander.expand_url("https://bit.ly/abc") == "https://example.com/a"
    assert probe.calls == ["https://bit.ly/abc"]


@async_test
async def test_extra_shorteners_are_recognized():
    expander, _, _ = make_expander(
        redirects={"https://sho.rt/1": "https://example.com/1"},
        extra_shorteners=["sho.rt"],
    )

    assert await expander.process_text("go https://sho.rt/1") == "go https://example.com/1"


@async_test
async def test_process_file_writes_expanded_text(tmp_path: Path):
    expander, _, _ = make_expander()
    src = tmp_path / "notes.md"
    dst = tmp_path / "notes_expanded.md"
    src.write_text("Check [this](https://bit.ly/abc) and https://bit.ly/xyz now\n", encoding="utf-8")

    result = await expander.process_file(src, dst)

    assert result == ProcessResult(success=True, input_path=src, output_path=dst)
    assert dst.read_text(encoding="utf-8") == (
        "Check [this](https://example.com/a) and https://example.com/b now\n"
    )
    assert result.to_dict() == {
        "success": True,
        "input_path": str(src),
        "output_path": str(dst),
    }


@async_test
async def test_file_without_shorteners_round_trips_byte_identical(tmp_path: Path):
    expander, _, _ = make_expander()
    raw = "Line one https://example.com/x\r\n[é](https://example.org/ü)\r\n\ttrailing  \n".encode("utf-8")
    src = tmp_path / "in.txt"
    dst = tmp_path / "out.txt"
    src.write_bytes(raw)

    result = await expander.process_file(src, dst)

    assert result.success is True
    assert dst.read_bytes() == raw


@async_test
async def test_missing_input_reports_error_and_writes_nothing(tmp_path: Path):
    expander, _, _ = make_expander()
    dst = tmp_path / "out.md"

    result = await expander.process_file(tmp_path / "nope.md", dst)

    assert result.success is False
    assert "nope.md" in result.error
    assert result.to_dict() == {"success": False, "error": result.error}
    assert not dst.exists()


@async_test
async def test_unwritable_output_reports_error(tmp_path: Path):
    expander, _, _ = make_expander()
    src = tmp_path / "in.md"
    src.write_text("https://bit.ly/abc", encoding="utf-8")

    result = await expander.process_file(src, tmp_path / "no-such-dir" / "out.md")

    assert result.success is False
    assert "Cannot write" in result.error


@async_test
async def test_undecodable_input_reports_error(tmp_path: Path):
    expander, _, _ = make_expander()
    src = tmp_path / "binary.md"
    src.write_bytes(b"\xff\xfe\x00bad")

    result = await expander.process_file(src, tmp_path / "out.md")

    assert result.success is False
    assert "Cannot read" in result.error
    assert list(tmp_path.iterdir()) == [src]


@async_test
async def test_close_is_idempotent_and_context_manager_closes():
    expander, probe, navigator = make_expander()
    await expander.close()
    await expander.close()

    async with make_expander()[0] as other:
        nav = other.resolver.navigator
    assert nav.closed == 1


@pytest.mark.parametrize(
    "kwargs",
    [{"concurrency": 0}, {"timeout": 0}, {"max_retries": -1}],
)
def test_invalid_settings_raise(kwargs):
    with pytest.raises(ValueError):
        URLExpander(navigator=FailingNavigator(), prober=MappingProbe({}), **kwargs)


def test_defaults():
    expander = URLExpander(navigator=FailingNavigator(), prober=MappingProbe({}))
    assert expander.config.concurrency == 5
    assert expander.config.timeout_ms == 30000
    assert expander.config.max_retries == 2


def test_default_output_path():
    assert default_output_path("docs/notes.md") == Path("docs/notes_expanded.md")
    assert default_output_path("README") == Path("README_expanded")
    assert default_output_path("a.txt", "_full") == Path("a_full.txt")


def test_async_test_exposes_fixture_parameters():
    async def needs_fixture(tmp_path):
        return tmp_path

    wrapped = async_test(needs_fixture)

    assert list(inspect.signature(wrapped).parameters) == ["tmp_path"]
    assert wrapped("dir") == "dir"
