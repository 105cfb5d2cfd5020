"""
SuggestionGenerator - advisory follow-up prompts.

Suggestions are plain strings shown next to the reply. They are never
actions and never reach the executor.
"""

from typing import List, Tuple

STUDY_TERMS = ("exam", "study")
STRESS_TERMS = ("stressed", "overwhelmed")

STUDY_SUGGESTIONS = [
    "Would you like me to create a study schedule?",
    "Should I set up break reminders during study sessions?",
    "Would you like me to track your study progress?",
]

STRESS_SUGGESTIONS = [
    "Would you like me to schedule some relaxation time?",
    "Should I suggest some breathing exercises?",
    "Would you like to break down your tasks into smaller steps?",
]

# Opt-in ideas offered to an emotional user who asks to feel better
GENTLE_SUGGESTIONS = [
    "🖌 Try a 5-minute art activity",
    "🎧 Listen to calming instrumental music",
    "🌱 Take 10 minutes outside, if possible",
    "😂 Watch a 2-min funny animal video",
    "✏️ List 3 things that made you smile this month",
]

_TRIGGERS: List[Tuple[Tuple[str, ...], List[str]]] = [
    (STUDY_TERMS, STUDY_SUGGESTIONS),
    (STRESS_TERMS, STRESS_SUGGESTIONS),
]


class SuggestionGenerator:
    """Keyword-triggered suggestion lists; several triggers may fire."""

    def suggest(self, user_id: str, input_text: str) -> List[str]:
        lowered = input_text.lower()
        suggestions: List[str] = []
        for terms, prompts in _TRIGGERS:
            if any(term in lowered for term in terms):
                suggestions.extend(prompts)
        return suggestions

    def gentle(self) -> List[str]:
        return list(GENTLE_SUGGESTIONS)
