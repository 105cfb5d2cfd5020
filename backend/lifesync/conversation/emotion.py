"""
EmotionClassifier - coarse affect detection by keyword membership.

Two states only. Anything emotional switches the assistant into a
listening register where no actions are proposed.
"""

import logging
from enum import Enum
from typing import Tuple

logger = logging.getLogger(__name__)


class AffectState(str, Enum):
    """Emotional register of a user turn."""
    EMOTIONAL = "emotional"
    NEUTRAL = "neutral"


# Negative-affect vocabulary, matched as case-insensitive substrings
EMOTIONAL_TERMS: Tuple[str, ...] = (
    "depressed",
    "stressed",
    "hate my job",
    "feel like shit",
    "lonely",
    "overwhelmed",
    "no energy",
    "no motivation",
    "worthless",
    "hopeless",
    "miserable",
    "sad",
    "burnout",
)

# Phrases that show an emotional user is asking to feel better
COMFORT_SEEKING_TERMS: Tuple[str, ...] = (
    "happy",
    "happiness",
    "feel better",
    "help",
)


class EmotionClassifier:
    """Keyword classifier for {emotional, neutral}."""

    def __init__(self, terms: Tuple[str, ...] = EMOTIONAL_TERMS):
        self.terms = terms

    def classify(self, text: str) -> AffectState:
        lowered = text.lower()
        for term in self.terms:
            if term in lowered:
                logger.debug(f"Emotional term matched: {term!r}")
                return AffectState.EMOTIONAL
        return AffectState.NEUTRAL

    def wants_comfort(self, text: str) -> bool:
        """True when the text asks for help or happiness."""
        lowered = text.lower()
        return any(term in lowered for term in COMFORT_SEEKING_TERMS)
