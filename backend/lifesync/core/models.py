"""
MongoDB Models (Pydantic)

Document schemas for the personal stores: tasks, calendar events, goals
and mood entries. Every document is owned by a user_id.
"""

from typing import List, Optional
from datetime import datetime
from pydantic import BaseModel, Field
from enum import Enum


class Priority(str, Enum):
    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class TaskStatus(str, Enum):
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class EventType(str, Enum):
    CLASS = "class"
    EXAM = "exam"
    PERSONAL = "personal"
    AI_SCHEDULED = "ai-scheduled"
    MEETING = "meeting"
    BREAK = "break"


class GoalCategory(str, Enum):
    CAREER = "Career"
    HEALTH = "Health"
    WELLNESS = "Wellness"
    EDUCATION = "Education"
    PERSONAL = "Personal"
    FINANCE = "Finance"


class GoalStatus(str, Enum):
    NOT_STARTED = "not-started"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    PAUSED = "paused"
    CANCELLED = "cancelled"


class Mood(str, Enum):
    EXCITED = "Excited"
    HAPPY = "Happy"
    NEUTRAL = "Neutral"
    TIRED = "Tired"
    STRESSED = "Stressed"
    ANXIOUS = "Anxious"
    SAD = "Sad"


class Task(BaseModel):
    """Task document."""

    id: Optional[str] = Field(None, alias="_id")
    user_id: str
    title: str
    description: Optional[str] = None
    priority: Priority = Priority.MEDIUM
    status: TaskStatus = TaskStatus.PENDING
    due_date: Optional[datetime] = None
    time: Optional[str] = None  # "HH:MM" reminder time
    estimated_duration: Optional[int] = Field(None, ge=0)  # minutes
    tags: List[str] = Field(default_factory=list)

    # AI provenance
    ai_suggested: bool = False
    ai_context: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)
    completed_at: Optional[datetime] = None

    class Config:
        populate_by_name = True


class CalendarEvent(BaseModel):
    """Calendar event document."""

    id: Optional[str] = Field(None, alias="_id")
    user_id: str
    title: str
    description: Optional[str] = None
    start_time: datetime
    end_time: datetime
    location: Optional[str] = None
    type: EventType = EventType.PERSONAL
    priority: Priority = Priority.MEDIUM
    is_all_day: bool = False

    ai_suggested: bool = False
    ai_context: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    class Config:
        populate_by_name = True


class Goal(BaseModel):
    """Goal document."""

    id: Optional[str] = Field(None, alias="_id")
    user_id: str
    title: str
    description: str = ""
    category: GoalCategory = GoalCategory.PERSONAL
    priority: Priority = Priority.MEDIUM
    status: GoalStatus = GoalStatus.NOT_STARTED
    progress: int = Field(0, ge=0, le=100)
    target_date: datetime
    start_date: Optional[datetime] = None
    completed_date: Optional[datetime] = None
    tags: List[str] = Field(default_factory=list)

    ai_suggested: bool = False
    ai_context: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    class Config:
        populate_by_name = True


class MoodEntry(BaseModel):
    """Mood entry document, at most one per user per day."""

    id: Optional[str] = Field(None, alias="_id")
    user_id: str
    date: datetime
    mood: Mood
    energy: int = Field(..., ge=1, le=5)
    notes: Optional[str] = None
    triggers: List[str] = Field(default_factory=list)
    activities: List[str] = Field(default_factory=list)

    ai_suggested: bool = False
    ai_context: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.now)
    updated_at: datetime = Field(default_factory=datetime.now)

    class Config:
        populate_by_name = True
