"""
Candidate actions - proposed, unexecuted writes to the personal stores.

One tagged variant per store (task, calendar, goal, mood), each with its
own payload type. Candidates are frozen once built; the wire format is
camelCase ({type, operation, payload, originatingText}) and also accepts
the legacy client shape ({type, action, data}).
"""

import datetime
from datetime import date
from enum import Enum
from typing import Annotated, Literal, Optional, Union

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, field_validator
from pydantic.alias_generators import to_camel

from lifesync.core.models import EventType, GoalCategory, Mood, Priority


class ActionType(str, Enum):
    TASK = "task"
    CALENDAR = "calendar"
    GOAL = "goal"
    MOOD = "mood"


class ActionOperation(str, Enum):
    CREATE = "create"
    UPDATE = "update"
    DELETE = "delete"


class _WireModel(BaseModel):
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        frozen=True,
    )


# ── Payloads ──

class TaskPayload(_WireModel):
    title: str
    priority: Priority = Priority.MEDIUM
    description: Optional[str] = None
    time: Optional[str] = None  # "HH:MM"
    ai_suggested: bool = True
    ai_context: str = ""


class CalendarPayload(_WireModel):
    title: str
    type: EventType = EventType.PERSONAL
    start_time: str = "09:00"
    end_time: str = "10:00"
    date: datetime.date = Field(default_factory=datetime.date.today)
    is_all_day: bool = False
    ai_suggested: bool = True
    ai_context: str = ""


class GoalPayload(_WireModel):
    title: str
    description: str = ""
    category: GoalCategory = GoalCategory.PERSONAL
    target_date: date
    ai_suggested: bool = True
    ai_context: str = ""


class MoodPayload(_WireModel):
    mood: Mood
    energy: int = Field(3, ge=1, le=5)
    notes: Optional[str] = None
    ai_suggested: bool = True
    ai_context: str = ""


# ── Candidates ──

class _Candidate(_WireModel):
    operation: ActionOperation = Field(
        ActionOperation.CREATE,
        validation_alias=AliasChoices("operation", "action"),
    )
    originating_text: str = ""

    @field_validator("operation")
    @classmethod
    def _create_only(cls, value: ActionOperation) -> ActionOperation:
        # Only creation is ever proposed
        if value != ActionOperation.CREATE:
            raise ValueError(f"operation '{value.value}' is not supported for candidate actions")
        return value

    @property
    def action_type(self) -> ActionType:
        return ActionType(self.type)


class TaskAction(_Candidate):
    type: Literal["task"] = "task"
    payload: TaskPayload = Field(validation_alias=AliasChoices("payload", "data"))


class CalendarAction(_Candidate):
    type: Literal["calendar"] = "calendar"
    payload: CalendarPayload = Field(validation_alias=AliasChoices("payload", "data"))


class GoalAction(_Candidate):
    type: Literal["goal"] = "goal"
    payload: GoalPayload = Field(validation_alias=AliasChoices("payload", "data"))


class MoodAction(_Candidate):
    type: Literal["mood"] = "mood"
    payload: MoodPayload = Field(validation_alias=AliasChoices("payload", "data"))


CandidateAction = Annotated[
    Union[TaskAction, CalendarAction, GoalAction, MoodAction],
    Field(discriminator="type"),
]

_candidate_adapter = TypeAdapter(CandidateAction)


def parse_candidate(data: dict) -> CandidateAction:
    """Validate a wire dict into the matching candidate variant."""
    return _candidate_adapter.validate_python(data)


def dump_candidate(action: CandidateAction) -> dict:
    """Serialize a candidate to its camelCase wire form."""
    return action.model_dump(mode="json", by_alias=True)
