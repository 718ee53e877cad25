"""Applies resolved URLs back into the source text.

Markdown links are rewritten by replacing their exact original span text,
once per detected occurrence. Bare URLs are rewritten with a global literal
replace of the URL string, which also touches copies of that string the
detector did not report (inside code blocks, for instance).
"""

import logging
from typing import Mapping, Sequence

from .models.types import OccurrenceKind, ResolutionOutcome, URLOccurrence

logger = logging.getLogger(__name__)


class TextRewriter:
    """Rewrites text using resolution outcomes.

    Example:
        rewriter = TextRewriter()
        new_text = rewriter.rewrite(text, occurrences, outcomes)
    """

    def rewrite(
        self,
        text: str,
        occurrences: Sequence[URLOccurrence],
        outcomes: Mapping[str, ResolutionOutcome],
    ) -> str:
        """Return text with every successfully resolved occurrence replaced.

        Args:
            text: Original text the occurrences were detected in.
            occurrences: Detected occurrences, Markdown first.
            outcomes: Resolution outcomes keyed by original URL.

        Returns:
            Rewritten text; identical to the input if nothing changed.
        """
        result = text

        for occ in occurrences:
            if occ.kind is not OccurrenceKind.MARKDOWN:
                continue
            outcome = outcomes.get(occ.raw_url)
            if outcome is None or not outcome.changed:
                continue

            original = occ.span_text(text)
            replacement = f"[{occ.display_text}]({outcome.resolved_url})"
            result = result.replace(original, replacement, 1)
            logger.info(f"Expanded: {occ.raw_url} → {outcome.resolved_url}")

        done: set[str] = set()
        for occ in occurrences:
            if occ.kind is not OccurrenceKind.BARE or occ.raw_url in done:
                continue
            done.add(occ.raw_url)
            outcome = outcomes.get(occ.raw_url)
            if outcome is None or not outcome.changed:
                continue

            result = result.replace(occ.raw_url, outcome.resolved_url)
            logger.info(f"Expanded: {occ.raw_url} → {outcome.resolved_url}")

        return result
