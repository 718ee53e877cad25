import os
from pathlib import Path

import pytest

from cli import main as cli_main
from cli.config import Config
from url_expander import ProcessResult


ENV_VARS = [
    "URL_EXPANDER_CONCURRENCY",
    "URL_EXPANDER_TIMEOUT",
    "URL_EXPANDER_RETRIES",
    "URL_EXPANDER_EXTRA_SHORTENERS",
    "URL_EXPANDER_OUTPUT_SUFFIX",
    "URL_EXPANDER_LOG_LEVEL",
]


@pytest.fixture
def clean_env(monkeypatch, tmp_path):
    for name in ENV_VARS:
        monkeypatch.delenv(name, raising=False)
    env_file = tmp_path / ".env"
    env_file.write_text("", encoding="utf-8")
    yield env_file
    # load_dotenv writes straight into os.environ
    for name in ENV_VARS:
        os.environ.pop(name, None)


def test_config_defaults(clean_env):
    config = Config.load(clean_env)

    assert config.concurrency == 5
    assert config.timeout_seconds == 30
    assert config.timeout_ms == 30000
    assert config.retries == 2
    assert config.extra_shorteners == []
    assert config.output_suffix == "_expanded"
    assert config.log_level == "INFO"
    assert config.validate() == []


def test_config_from_env_file(clean_env):
    clean_env.write_text(
        "URL_EXPANDER_CONCURRENCY=8\n"
        "URL_EXPANDER_TIMEOUT=3\n"
        "URL_EXPANDER_RETRIES=0\n"
        "URL_EXPANDER_EXTRA_SHORTENERS=sho.rt, go.example ,\n"
        "URL_EXPANDER_LOG_LEVEL=debug\n",
        encoding="utf-8",
    )

    config = Config.load(clean_env)

    assert config.concurrency == 8
    assert config.timeout_seconds == 3
    assert config.retries == 0
    assert config.extra_shorteners == ["sho.rt", "go.example"]
    assert config.log_level == "DEBUG"
    assert len(config.validate()) == 1


@pytest.mark.parametrize(
    "name,value",
    [
        ("URL_EXPANDER_CONCURRENCY", "0"),
        ("URL_EXPANDER_CONCURRENCY", "many"),
        ("URL_EXPANDER_TIMEOUT", "0"),
        ("URL_EXPANDER_RETRIES", "-1"),
        ("URL_EXPANDER_LOG_LEVEL", "LOUD"),
    ],
)
def test_config_rejects_bad_values(clean_env, monkeypatch, name, value):
    monkeypatch.setenv(name, value)
    with pytest.raises(ValueError, match=name):
        Config.load(clean_env)


def test_config_reads_env_file_from_working_directory(clean_env, monkeypatch):
    clean_env.write_text("URL_EXPANDER_CONCURRENCY=7\n", encoding="utf-8")
    monkeypatch.chdir(clean_env.parent)

    config = Config.load()

    assert config.concurrency == 7


def test_flags_override_config():
    parser = cli_main.build_parser()
    args = parser.parse_args(["process", "a.md", "-c", "3", "-t", "10", "-r", "4", "-v"])

    config = cli_main.apply_overrides(Config(), args)

    assert config.concurrency == 3
    assert config.timeout_ms == 10000
    assert config.retries == 4
    assert config.log_level == "DEBUG"


def test_flag_out_of_range():
    args = cli_main.build_parser().parse_args(["process", "a.md", "-c", "0"])
    with pytest.raises(ValueError):
        cli_main.apply_overrides(Config(), args)


def test_no_command_prints_help(capsys):
    assert cli_main.main([]) == 0
    assert "usage: url-expander" in capsys.readouterr().out


class FakeExpander:
    instances = []

    def __init__(self, concurrency, timeout, max_retries, extra_shorteners):
        self.settings = (concurrency, timeout, max_retries, extra_shorteners)
        self.processed = []
        self.closed = False
        FakeExpander.instances.append(self)

    async def process_file(self, input_path, output_path):
        self.processed.append((Path(input_path), Path(output_path)))
        if not Path(input_path).exists():
            return ProcessResult(success=False, error=f"Cannot read {input_path}")
        Path(output_path).write_text("done", encoding="utf-8")
        return ProcessResult(success=True, input_path=input_path, output_path=output_path)

    async def close(self):
        self.closed = True


@pytest.fixture
def fake_expander(monkeypatch, clean_env):
    FakeExpander.instances = []
    monkeypatch.setattr(cli_main, "URLExpander", FakeExpander)
    monkeypatch.setattr(cli_main.Config, "load", classmethod(lambda cls: Config()))
    return FakeExpander


def test_process_writes_default_output_name(fake_expander, tmp_path):
    src = tmp_path / "notes.md"
    src.write_text("x", encoding="utf-8")

    assert cli_main.main(["process", str(src), "-t", "45"]) == 0

    [expander] = fake_expander.instances
    assert expander.settings == (5, 45000, 2, [])
    assert expander.processed == [(src, tmp_path / "notes_expanded.md")]
    assert expander.closed is True


def test_process_reports_failure_and_still_closes(fake_expander, tmp_path):
    good = tmp_path / "good.md"
    good.write_text("x", encoding="utf-8")

    code = cli_main.main(["process", str(good), str(tmp_path / "missing.md")])

    assert code == 1
    [expander] = fake_expander.instances
    assert len(expander.processed) == 2
    assert expander.closed is True


def test_explicit_output(fake_expander, tmp_path):
    src = tmp_path / "in.md"
    src.write_text("x", encoding="utf-8")
    out = tmp_path / "custom.md"

    assert cli_main.main(["process", str(src), "-o", str(out)]) == 0
    assert out.read_text(encoding="utf-8") == "done"


def test_output_with_several_inputs_is_rejected(fake_expander, tmp_path):
    code = cli_main.main(["process", "a.md", "b.md", "-o", str(tmp_path / "x.md")])

    assert code == 2
    assert fake_expander.instances == []
