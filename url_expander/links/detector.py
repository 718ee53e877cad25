"""URL detection in plain text and Markdown.

This module has ZERO external dependencies - it only uses Python standard library.

Known imprecision: punctuation that is not in the excluded set is part of the
URL token, so ``https://bit.ly/x.`` at the end of a sentence is detected with
the trailing period.
"""

import re

from ..models.types import OccurrenceKind, URLOccurrence

# Characters that terminate a URL token besides whitespace
_URL_BODY = r"https?://[^\s<>\"'()]+"


class URLDetector:
    """Finds Markdown links and bare URLs in text.

    Every position is reported, including repeats of the same URL string;
    ``unique_urls`` gives the de-duplicated set to resolve.

    Example:
        detector = URLDetector()
        occurrences = detector.detect("see https://bit.ly/x and [y](https://bit.ly/y)")
        for occ in occurrences:
            print(f"{occ.kind.value} {occ.raw_url} [{occ.span_start}:{occ.span_end}]")
    """

    # [label](url), label without nested brackets
    MARKDOWN_PATTERN = re.compile(rf"\[([^\]]+)\]\(({_URL_BODY})\)")

    # URL token bounded by whitespace or string edges on both sides
    BARE_PATTERN = re.compile(rf"(?<!\S){_URL_BODY}(?!\S)")

    def find_markdown_links(self, text: str) -> list[URLOccurrence]:
        """Find all ``[label](url)`` constructs.

        Args:
            text: Text to search.

        Returns:
            Markdown occurrences in source order.
        """
        return [
            URLOccurrence(
                raw_url=match.group(2),
                kind=OccurrenceKind.MARKDOWN,
                span_start=match.start(),
                span_end=match.end(),
                display_text=match.group(1),
            )
            for match in self.MARKDOWN_PATTERN.finditer(text)
        ]

    def find_bare_urls(self, text: str) -> list[URLOccurrence]:
        """Find all whitespace-delimited URL tokens.

        Args:
            text: Text to search.

        Returns:
            Bare occurrences in source order, including ones that sit inside
            Markdown links (``detect`` filters those out).
        """
        return [
            URLOccurrence(
                raw_url=match.group(0),
                kind=OccurrenceKind.BARE,
                span_start=match.start(),
                span_end=match.end(),
            )
            for match in self.BARE_PATTERN.finditer(text)
        ]

    def detect(self, text: str) -> list[URLOccurrence]:
        """Detect every URL occurrence in text.

        Markdown occurrences come first, then bare ones, each in source order.
        A bare URL starting inside a Markdown span is dropped, so no two
        returned occurrences overlap.

        Args:
            text: Text to analyze.

        Returns:
            List of URLOccurrence objects.
        """
        if not text:
            return []

        markdown = self.find_markdown_links(text)
        bare = [
            occ
            for occ in self.find_bare_urls(text)
            if not any(
                link.span_start <= occ.span_start < link.span_end
                for link in markdown
            )
        ]
        return markdown + bare

    @staticmethod
    def unique_urls(occurrences: list[URLOccurrence]) -> list[str]:
        """Return the distinct URL strings in first-seen order."""
        return list(dict.fromkeys(occ.raw_url for occ in occurrences))
