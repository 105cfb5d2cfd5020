"""
ActionExtractor - turns free text into candidate actions.

A fixed, ordered table of independent rules runs over the lower-cased
input. Rules are not mutually exclusive: one message can yield a study
task, a chore and a mood log at the same time. Each rule returns zero,
one or two candidates. Nothing here touches a store.

Only called for neutral turns; the orchestrator owns that gate.
"""

import logging
import re
from dataclasses import dataclass
from datetime import date, datetime, timedelta
from typing import Callable, Dict, List, Optional

from lifesync.conversation.actions import (
    CalendarAction,
    CalendarPayload,
    CandidateAction,
    GoalAction,
    GoalPayload,
    MoodAction,
    MoodPayload,
    TaskAction,
    TaskPayload,
)
from lifesync.core.models import EventType, GoalCategory, Mood, Priority

logger = logging.getLogger(__name__)


_WEEKDAYS = "monday|tuesday|wednesday|thursday|friday|saturday|sunday"

_EXAM_PATTERN = re.compile(
    rf"\b(exam|test|quiz)(?:s|zes)?\b.*?\b({_WEEKDAYS}|\d{{1,2}}(?:st|nd|rd|th)?)\b",
    re.IGNORECASE,
)
_CHORE_PATTERN = re.compile(r"(laundry|cleaning|groceries|shopping)", re.IGNORECASE)
_CLOCK_PATTERN = re.compile(r"(\d{1,2})\s*(am|pm)", re.IGNORECASE)
_GOAL_PATTERN = re.compile(
    r"(?:my goal is to|set a goal to|goal:)\s*(?P<title>[^.!?\n]+)",
    re.IGNORECASE,
)

MEDICATION_TERMS = ("medica", "medicine", "remind")

# Checked in this order; the first one present wins
MOOD_TERMS = ("stressed", "overwhelmed", "anxious", "happy", "excited", "tired", "sad")

MOOD_BY_TERM: Dict[str, Mood] = {
    "stressed": Mood.STRESSED,
    "overwhelmed": Mood.STRESSED,
    "anxious": Mood.ANXIOUS,
    "happy": Mood.HAPPY,
    "excited": Mood.EXCITED,
    "tired": Mood.TIRED,
    "sad": Mood.SAD,
}

ENERGY_BY_MOOD: Dict[Mood, int] = {
    Mood.EXCITED: 5,
    Mood.HAPPY: 4,
    Mood.NEUTRAL: 3,
    Mood.TIRED: 2,
    Mood.STRESSED: 2,
    Mood.ANXIOUS: 2,
    Mood.SAD: 1,
}

GOAL_CATEGORY_TERMS: Dict[GoalCategory, tuple] = {
    GoalCategory.EDUCATION: ("study", "learn", "course", "read", "exam", "degree"),
    GoalCategory.HEALTH: ("run", "exercise", "gym", "workout", "weight", "sleep", "walk"),
    GoalCategory.FINANCE: ("save", "money", "budget", "debt", "invest"),
    GoalCategory.CAREER: ("job", "career", "promotion", "interview", "work"),
    GoalCategory.WELLNESS: ("meditate", "journal", "relax", "mindful"),
}

EXAM_SLOT = ("09:00", "10:00")
MEDICATION_SLOT = ("19:00", "19:15")
MEDICATION_DURATION = timedelta(minutes=15)
GOAL_HORIZON = timedelta(days=30)


def to_clock(hour: int, meridiem: str) -> str:
    """Convert '7', 'pm' to '19:00'."""
    hour = hour % 12
    if meridiem.lower() == "pm":
        hour += 12
    return f"{hour:02d}:00"


def add_minutes(clock: str, delta: timedelta) -> str:
    start = datetime.strptime(clock, "%H:%M")
    return (start + delta).strftime("%H:%M")


def mood_for_term(term: str) -> Mood:
    return MOOD_BY_TERM.get(term, Mood.NEUTRAL)


def energy_for_mood(mood: Mood) -> int:
    return ENERGY_BY_MOOD.get(mood, 3)


@dataclass(frozen=True)
class ExtractionRule:
    """One row of the extraction table."""
    name: str
    apply: Callable[[str, str, date], List[CandidateAction]]


# ── Rules ──
# Each receives (original text, lower-cased text, today).

def _exam_rule(text: str, lowered: str, today: date) -> List[CandidateAction]:
    match = _EXAM_PATTERN.search(text)
    if not match:
        return []

    kind, when = match.group(1).lower(), match.group(2)
    label = f"{kind} {when}"
    return [
        TaskAction(
            payload=TaskPayload(
                title=f"Study for {label}",
                priority=Priority.HIGH,
                ai_context=text,
            ),
            originating_text=text,
        ),
        CalendarAction(
            payload=CalendarPayload(
                title=label[0].upper() + label[1:],
                type=EventType.EXAM,
                start_time=EXAM_SLOT[0],
                end_time=EXAM_SLOT[1],
                date=today,
                ai_context=text,
            ),
            originating_text=text,
        ),
    ]


def _chore_rule(text: str, lowered: str, today: date) -> List[CandidateAction]:
    match = _CHORE_PATTERN.search(lowered)
    if not match:
        return []

    return [
        TaskAction(
            payload=TaskPayload(
                title=f"Do {match.group(1)}",
                priority=Priority.MEDIUM,
                ai_context=text,
            ),
            originating_text=text,
        )
    ]


def _bath_rule(text: str, lowered: str, today: date) -> List[CandidateAction]:
    if "bath" not in lowered:
        return []

    return [
        TaskAction(
            payload=TaskPayload(title="Take a Bath", priority=Priority.LOW, ai_context=text),
            originating_text=text,
        )
    ]


def _medication_rule(text: str, lowered: str, today: date) -> List[CandidateAction]:
    if not any(term in lowered for term in MEDICATION_TERMS):
        return []

    clock: Optional[str] = None
    match = _CLOCK_PATTERN.search(text)
    if match:
        clock = to_clock(int(match.group(1)), match.group(2))

    start, end = MEDICATION_SLOT
    if clock:
        start, end = clock, add_minutes(clock, MEDICATION_DURATION)

    return [
        TaskAction(
            payload=TaskPayload(
                title="Take Medication",
                priority=Priority.HIGH,
                time=clock,
                ai_context=text,
            ),
            originating_text=text,
        ),
        CalendarAction(
            payload=CalendarPayload(
                title="Take Medication",
                type=EventType.PERSONAL,
                start_time=start,
                end_time=end,
                date=today,
                ai_context=text,
            ),
            originating_text=text,
        ),
    ]


def _mood_rule(text: str, lowered: str, today: date) -> List[CandidateAction]:
    term = next((t for t in MOOD_TERMS if t in lowered), None)
    if term is None:
        return []

    mood = mood_for_term(term)
    return [
        MoodAction(
            payload=MoodPayload(
                mood=mood,
                energy=energy_for_mood(mood),
                notes=text,
                ai_context=text,
            ),
            originating_text=text,
        )
    ]


def _goal_category(title: str) -> GoalCategory:
    words = set(re.findall(r"[a-z]+", title.lower()))
    for category, terms in GOAL_CATEGORY_TERMS.items():
        if words.intersection(terms):
            return category
    return GoalCategory.PERSONAL


def _goal_rule(text: str, lowered: str, today: date) -> List[CandidateAction]:
    match = _GOAL_PATTERN.search(text)
    if not match:
        return []

    title = match.group("title").strip()
    if not title:
        return []

    return [
        GoalAction(
            payload=GoalPayload(
                title=title[0].upper() + title[1:],
                description=text,
                category=_goal_category(title),
                target_date=today + GOAL_HORIZON,
                ai_context=text,
            ),
            originating_text=text,
        )
    ]


DEFAULT_RULES: List[ExtractionRule] = [
    ExtractionRule("exam", _exam_rule),
    ExtractionRule("chore", _chore_rule),
    ExtractionRule("bath", _bath_rule),
    ExtractionRule("medication", _medication_rule),
    ExtractionRule("mood", _mood_rule),
    ExtractionRule("goal", _goal_rule),
]


class ActionExtractor:
    """
    Runs every rule over the input and concatenates the results.

    Pure with respect to the input text (and the injected clock), so the
    same message always yields the same candidates.
    """

    def __init__(
        self,
        rules: Optional[List[ExtractionRule]] = None,
        today: Callable[[], date] = date.today,
    ):
        self.rules = rules if rules is not None else DEFAULT_RULES
        self._today = today

    def extract(self, user_id: str, input_text: str, reply_text: str = "") -> List[CandidateAction]:
        """
        Extract candidate actions from one user message.

        Args:
            user_id: Owner of the conversation (for logging only)
            input_text: The raw user message
            reply_text: The assistant's reply for the same turn (unused by
                the current rules, kept for rules that read it)
        """
        lowered = input_text.lower()
        today = self._today()

        candidates: List[CandidateAction] = []
        for rule in self.rules:
            found = rule.apply(input_text, lowered, today)
            if found:
                logger.debug(f"Rule '{rule.name}' produced {len(found)} candidate(s) for {user_id}")
            candidates.extend(found)

        logger.info(f"Extracted {len(candidates)} candidate action(s) for {user_id}")
        return candidates
