"""
Storage Module

Contains persistence layer:
- repositories: per-store repositories (MongoDB and in-memory backends)
"""

from lifesync.storage.repositories import (
    RecordRepository,
    TaskRepository,
    CalendarEventRepository,
    GoalRepository,
    MoodEntryRepository,
    InMemoryTaskRepository,
    InMemoryCalendarEventRepository,
    InMemoryGoalRepository,
    InMemoryMoodEntryRepository,
)

__all__ = [
    "RecordRepository",
    "TaskRepository",
    "CalendarEventRepository",
    "GoalRepository",
    "MoodEntryRepository",
    "InMemoryTaskRepository",
    "InMemoryCalendarEventRepository",
    "InMemoryGoalRepository",
    "InMemoryMoodEntryRepository",
]
