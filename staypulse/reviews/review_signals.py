"""
Review Signal Extractor (Deterministic)
========================================

Detects highlight tags and recurring issues in public review text using
fixed keyword lexicons, so results are reproducible.

Usage:
    tags, issues = detect_insights("Loved the rooftop but the street was noisy")
    # (["Rooftop highlight"], ["Noise complaint"])
"""

import logging
from typing import List, Optional, Sequence, Tuple

logger = logging.getLogger(__name__)


# =============================================================================
# LEXICONS
# =============================================================================
# Ordered (keyword, label) pairs. Iteration order defines the order of the
# generated labels. Keywords are matched as lowercase substrings.
# Several keywords may share a label; each match appends the label again.

TAG_LEXICON: Tuple[Tuple[str, str], ...] = (
    ("view", "Great view"),
    ("rooftop", "Rooftop highlight"),
    ("terrace", "Terrace mention"),
    ("kitchen", "Kitchen mention"),
    ("location", "Location praise"),
    ("host", "Host shoutout"),
    ("bikes", "Mobility perk"),
    ("espresso", "Amenity highlight"),
    ("plunge", "Plunge pool"),
)

ISSUE_LEXICON: Tuple[Tuple[str, str], ...] = (
    ("noise", "Noise complaint"),
    ("noisy", "Noise complaint"),
    ("construction", "Construction nearby"),
    ("glitchy", "Tech issue"),
    ("stairs", "Access concern"),
    ("steep", "Access concern"),
    ("loose", "Maintenance follow-up"),
    ("dark", "Lighting concern"),
    ("towel", "Linen issue"),
)


def match_lexicon(text: str, lexicon: Sequence[Tuple[str, str]]) -> List[str]:
    """Labels of every lexicon keyword contained in already-lowercased text."""
    return [label for keyword, label in lexicon if keyword in text]


class ReviewSignalExtractor:
    """
    Keyword-based tag and issue detector.

    The default lexicons are the module-level TAG_LEXICON / ISSUE_LEXICON;
    custom ones can be injected for other portfolios.
    """

    def __init__(
        self,
        tag_lexicon: Optional[Sequence[Tuple[str, str]]] = None,
        issue_lexicon: Optional[Sequence[Tuple[str, str]]] = None,
    ):
        self.tag_lexicon = tuple(tag_lexicon or TAG_LEXICON)
        self.issue_lexicon = tuple(issue_lexicon or ISSUE_LEXICON)

    def extract(self, text: Optional[str]) -> Tuple[List[str], List[str]]:
        """
        Scan review text for tags and issues.

        Args:
            text: Public review text (may be None or empty)

        Returns:
            (tags, issues): two lists, empty when there is no text.
            Duplicate labels are kept (e.g. "noise" and "noisy" both match).
        """
        if not text:
            return [], []

        lower = text.lower()
        tags = match_lexicon(lower, self.tag_lexicon)
        issues = match_lexicon(lower, self.issue_lexicon)

        if tags or issues:
            logger.debug(f"Detected {len(tags)} tags, {len(issues)} issues")
        return tags, issues


_default_extractor = ReviewSignalExtractor()


def detect_insights(text: Optional[str]) -> Tuple[List[str], List[str]]:
    """Run the default extractor over one review text."""
    return _default_extractor.extract(text)
