"""
Tests for the keyword layer of the conversation engine.

Tests:
1. EmotionClassifier - neutral default, case-insensitive matching
2. ActionExtractor - exam, chore, bath, medication, mood and goal rules
3. SuggestionGenerator - study and stress triggers

Usage:
    python scripts/test_extraction.py
"""

import logging
import sys
from datetime import date, timedelta
from pathlib import Path

sys.path.insert(0, str(Path(__file__).parent.parent))

from lifesync.conversation.actions import (
    ActionType,
    CalendarAction,
    MoodAction,
    TaskAction,
    GoalAction,
)
from lifesync.conversation.emotion import AffectState, EmotionClassifier
from lifesync.conversation.extractor import ActionExtractor
from lifesync.conversation.suggestions import (
    GENTLE_SUGGESTIONS,
    STRESS_SUGGESTIONS,
    STUDY_SUGGESTIONS,
    SuggestionGenerator,
)
from lifesync.core.models import EventType, GoalCategory, Mood, Priority

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)

TODAY = date(2025, 3, 3)


def make_extractor() -> ActionExtractor:
    return ActionExtractor(today=lambda: TODAY)


# --- EmotionClassifier ---


def test_classifier_defaults_to_neutral():
    classifier = EmotionClassifier()
    assert classifier.classify("Let's plan my week") == AffectState.NEUTRAL
    assert classifier.classify("") == AffectState.NEUTRAL


def test_classifier_matches_any_case():
    classifier = EmotionClassifier()
    assert classifier.classify("I feel so LONELY tonight") == AffectState.EMOTIONAL
    assert classifier.classify("Honestly I hate my job") == AffectState.EMOTIONAL
    assert classifier.classify("I'm feeling overwhelmed with my exam on Thursday") == AffectState.EMOTIONAL


def test_wants_comfort():
    classifier = EmotionClassifier()
    assert classifier.wants_comfort("I'm sad, can you help me?")
    assert classifier.wants_comfort("I just want to feel better")
    assert not classifier.wants_comfort("I'm sad")


# --- ActionExtractor ---


def test_exam_yields_study_task_and_calendar_event():
    text = "I need to schedule a study session for tomorrow, exam on Friday"
    candidates = make_extractor().extract("u1", text)

    assert [c.type for c in candidates] == ["task", "calendar"]
    task, event = candidates
    assert isinstance(task, TaskAction)
    assert task.payload.title == "Study for exam Friday"
    assert task.payload.priority == Priority.HIGH
    assert task.payload.ai_suggested
    assert task.payload.ai_context == text

    assert isinstance(event, CalendarAction)
    assert event.payload.title == "Exam Friday"
    assert event.payload.type == EventType.EXAM
    assert (event.payload.start_time, event.payload.end_time) == ("09:00", "10:00")
    assert event.payload.date == TODAY


def test_exam_with_day_number():
    candidates = make_extractor().extract("u1", "Quiz on the 14 in biology")
    assert candidates[0].payload.title == "Study for quiz 14"


def test_exam_plurals_and_ordinals():
    extractor = make_extractor()
    assert extractor.extract("u1", "Two exams on Friday")[0].payload.title == "Study for exam Friday"
    assert extractor.extract("u1", "quizzes start thursday")[0].payload.title == "Study for quiz thursday"
    assert extractor.extract("u1", "My exam is on the 15th")[0].payload.title == "Study for exam 15th"
    assert extractor.extract("u1", "testing 123 again") == []


def test_chore_yields_medium_task():
    candidates = make_extractor().extract("u1", "laundry")
    assert len(candidates) == 1
    assert candidates[0].action_type == ActionType.TASK
    assert candidates[0].payload.title == "Do laundry"
    assert candidates[0].payload.priority == Priority.MEDIUM


def test_bath_yields_low_task():
    candidates = make_extractor().extract("u1", "I should take a bath later")
    assert [c.payload.title for c in candidates] == ["Take a Bath"]
    assert candidates[0].payload.priority == Priority.LOW


def test_medication_with_time():
    candidates = make_extractor().extract("u1", "Remind me to take my medicine at 8pm")
    assert len(candidates) == 2
    task, event = candidates
    assert task.payload.title == "Take Medication"
    assert task.payload.time == "20:00"
    assert (event.payload.start_time, event.payload.end_time) == ("20:00", "20:15")
    assert event.payload.type == EventType.PERSONAL


def test_medication_without_time_uses_evening_slot():
    candidates = make_extractor().extract("u1", "don't let me forget my medication")
    task, event = candidates
    assert task.payload.time is None
    assert (event.payload.start_time, event.payload.end_time) == ("19:00", "19:15")


def test_mood_first_term_wins():
    candidates = make_extractor().extract("u1", "I'm happy and excited about today")
    assert len(candidates) == 1
    mood = candidates[0]
    assert isinstance(mood, MoodAction)
    assert mood.payload.mood == Mood.HAPPY
    assert mood.payload.energy == 4


def test_goal_rule():
    candidates = make_extractor().extract("u1", "My goal is to run a marathon. Wish me luck")
    assert len(candidates) == 1
    goal = candidates[0]
    assert isinstance(goal, GoalAction)
    assert goal.payload.title == "Run a marathon"
    assert goal.payload.category == GoalCategory.HEALTH
    assert goal.payload.target_date == TODAY + timedelta(days=30)


def test_rules_combine_in_table_order():
    candidates = make_extractor().extract("u1", "Test on Monday, groceries to buy and I'm tired")
    assert [c.type for c in candidates] == ["task", "calendar", "task", "mood"]
    assert candidates[2].payload.title == "Do groceries"
    assert candidates[3].payload.mood == Mood.TIRED


def test_no_match_yields_nothing():
    assert make_extractor().extract("u1", "hello there") == []


def test_extraction_is_idempotent():
    extractor = make_extractor()
    text = "exam on Friday, then laundry, remind me about medicine at 9am"
    assert extractor.extract("u1", text) == extractor.extract("u1", text)


# --- SuggestionGenerator ---


def test_suggestions_study_and_stress():
    suggester = SuggestionGenerator()
    assert suggester.suggest("u1", "I have to study") == STUDY_SUGGESTIONS
    assert suggester.suggest("u1", "so stressed about the exam") == STUDY_SUGGESTIONS + STRESS_SUGGESTIONS
    assert suggester.suggest("u1", "hello") == []


def test_gentle_suggestions_are_a_copy():
    suggester = SuggestionGenerator()
    gentle = suggester.gentle()
    gentle.append("mutated")
    assert suggester.gentle() == GENTLE_SUGGESTIONS


def main():
    tests = [
        test_classifier_defaults_to_neutral,
        test_classifier_matches_any_case,
        test_wants_comfort,
        test_exam_yields_study_task_and_calendar_event,
        test_exam_with_day_number,
        test_exam_plurals_and_ordinals,
        test_chore_yields_medium_task,
        test_bath_yields_low_task,
        test_medication_with_time,
        test_medication_without_time_uses_evening_slot,
        test_mood_first_term_wins,
        test_goal_rule,
        test_rules_combine_in_table_order,
        test_no_match_yields_nothing,
        test_extraction_is_idempotent,
        test_suggestions_study_and_stress,
        test_gentle_suggestions_are_a_copy,
    ]

    failed = 0
    for test in tests:
        try:
            test()
            logger.info(f"✅ PASS: {test.__name__}")
        except AssertionError as e:
            failed += 1
            logger.error(f"❌ FAIL: {test.__name__}: {e}")

    logger.info("=" * 80)
    logger.info("✅ ALL TESTS PASSED!" if not failed else f"❌ {failed} TEST(S) FAILED")
    return failed == 0


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
