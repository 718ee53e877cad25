"""Knowledge of URL-shortening services.

Matching is by substring on the normalized hostname, so regional variants and
subdomains of a shortener (``eu.bit.ly``, ``go.cutt.ly``) count as the
shortener itself. The flip side is that an unrelated host that happens to
contain an entry (``t.co`` inside ``bat.com``) also matches.
"""

import logging
from dataclasses import dataclass
from typing import Iterable, Optional
from urllib.parse import urlparse

from ..errors import ClassificationError

logger = logging.getLogger(__name__)

DEFAULT_SHORTENER_DOMAINS = (
    "bit.ly", "goo.gl", "tinyurl.com", "ow.ly", "t.co",
    "is.gd", "buff.ly", "adf.ly", "j.mp", "bc.vc",
    "twitthis.com", "u.to", "tinylink.in", "soo.gd",
    "s2r.co", "g.co", "youtu.be", "lnkd.in", "linkedin.com",
    "cutt.ly", "short.link", "tiny.cc", "rb.gy", "clk.im",
    "bit.do", "mcaf.ee", "qr.ae", "v.gd", "tr.im",
    "x.co", "1url.com", "t2m.io", "zip.net", "clicky.me",
    "short.io", "tinyurl.co", "urlshortener", "linktr.ee",
    "sni.pt", "snipurl.com", "snurl.com", "shorturl.at",
    "chilp.it", "cl.lk", "fa.by", "go2.me", "hit.my",
    "linkbee.com", "liip.to", "moourl.com", "pic.gd",
    "poprl.com", "qlnk.net", "ri.ms", "rubyurl.com",
    "shorl.com", "shrinkify.com", "shrinkster.com", "smsh.me",
    "snipr.com", "sp2.ro", "su.pr", "togoto.us",
    "trunc.im", "twurl.nl", "url.ie", "url4.eu", "urlx.org",
    "yep.it", "yfrog.com", "zi.ma", "zurl.ws", "bitly.com",
)


def normalize_host(host: str) -> str:
    """Lowercase a hostname and strip one leading ``www.``."""
    host = host.strip().lower()
    if host.startswith("www."):
        host = host[4:]
    return host


@dataclass(frozen=True)
class ShortenerRegistry:
    """Immutable set of normalized shortener hostnames."""

    domains: frozenset

    @classmethod
    def from_domains(cls, domains: Iterable[str]) -> "ShortenerRegistry":
        normalized = {normalize_host(d) for d in domains}
        normalized.discard("")
        return cls(domains=frozenset(normalized))

    @classmethod
    def default(cls, extra: Optional[Iterable[str]] = None) -> "ShortenerRegistry":
        """Build the built-in registry, optionally merged with extra domains."""
        return cls.from_domains([*DEFAULT_SHORTENER_DOMAINS, *(extra or ())])

    def matches(self, host: str) -> bool:
        """Return True if any entry is a substring of the normalized host."""
        host = normalize_host(host)
        return any(domain in host for domain in self.domains)

    def __len__(self) -> int:
        return len(self.domains)


class ShortenerClassifier:
    """Decides whether a URL points at a URL-shortening service.

    Example:
        classifier = ShortenerClassifier()
        classifier.is_shortened("https://BIT.LY/abc")   # True
        classifier.is_shortened("https://example.com")  # False
        classifier.is_shortened("not a url")            # False
    """

    def __init__(self, registry: Optional[ShortenerRegistry] = None):
        self.registry = registry or ShortenerRegistry.default()

    def is_shortened(self, url: str) -> bool:
        """Check if a URL belongs to a known shortener.

        Args:
            url: URL to classify.

        Returns:
            True if the URL's host matches a registry entry. Unparseable
            URLs are never shorteners.
        """
        try:
            host = self._hostname(url)
        except ClassificationError as e:
            logger.debug(f"Not classifying {url!r}: {e}")
            return False
        return self.registry.matches(host)

    @staticmethod
    def _hostname(url: str) -> str:
        try:
            parsed = urlparse(url)
            host = parsed.hostname
        except (TypeError, ValueError, AttributeError) as e:
            raise ClassificationError(f"unparseable URL: {e}") from e

        if not parsed.scheme or not host:
            raise ClassificationError("URL has no scheme or hostname")
        return host
