"""
Repositories for the personal stores.

Each store (tasks, calendar events, goals, mood entries) has one set of
domain rules (defaults on create, side effects of updates) and two
backends sharing them: MongoDB for the API and an in-memory dict for the
CLI mock mode and tests. Every operation is scoped by user_id.
"""

import uuid
from abc import ABC, abstractmethod
from datetime import date, datetime, time
from typing import Any, Dict, Generic, List, Optional, Tuple, Type, TypeVar

import structlog
from bson import ObjectId
from pydantic import BaseModel
from pymongo import ReturnDocument

from lifesync.core.database import (
    get_database,
    TASKS_COLLECTION,
    CALENDAR_EVENTS_COLLECTION,
    GOALS_COLLECTION,
    MOOD_ENTRIES_COLLECTION,
)
from lifesync.core.errors import NotFoundError
from lifesync.core.models import (
    CalendarEvent,
    Goal,
    GoalStatus,
    MoodEntry,
    Task,
    TaskStatus,
)

logger = structlog.get_logger()

ModelT = TypeVar("ModelT", bound=BaseModel)


def _as_datetime(value: Any) -> Any:
    if isinstance(value, date) and not isinstance(value, datetime):
        return datetime.combine(value, time.min)
    return value


def _parse_clock(value: str) -> time:
    """Parse '09:00', '9:00', '7pm' or '7 pm'."""
    cleaned = value.strip().lower().replace(" ", "")
    for fmt in ("%H:%M", "%I%p", "%I:%M%p"):
        try:
            return datetime.strptime(cleaned, fmt).time()
        except ValueError:
            continue
    raise ValueError(f"Unrecognized time of day: {value!r}")


class RecordRepository(ABC, Generic[ModelT]):
    """CRUD contract for one user-owned record type."""

    kind: str = "Record"
    model: Type[ModelT]

    def build(self, user_id: str, data: Dict[str, Any]) -> ModelT:
        """Turn creation data into a document, applying defaults."""
        fields = {k: _as_datetime(v) for k, v in data.items() if v is not None}
        fields.pop("id", None)
        fields.pop("_id", None)
        return self.model(user_id=user_id, **fields)

    def prepare_update(self, updates: Dict[str, Any]) -> Dict[str, Any]:
        """Derive implied fields from an update."""
        prepared = {k: _as_datetime(v) for k, v in updates.items()}
        for protected in ("id", "_id", "user_id", "created_at"):
            prepared.pop(protected, None)
        prepared["updated_at"] = datetime.now()
        return prepared

    def apply_update(self, current: ModelT, updates: Dict[str, Any]) -> Tuple[ModelT, Dict[str, Any]]:
        """
        Validate an update against the whole record before anything is written.

        Returns the updated record and the checked fields to store; fields
        the model does not know are dropped. Raises pydantic's ValidationError.
        """
        prepared = self.prepare_update(updates)
        record = self.model(**{**current.model_dump(), **prepared})
        fields = record.model_dump(include=set(prepared) - {"id"})
        return record, fields

    @abstractmethod
    async def create(self, user_id: str, data: Dict[str, Any]) -> ModelT:
        ...

    @abstractmethod
    async def find(self, user_id: str, filters: Optional[Dict[str, Any]] = None) -> List[ModelT]:
        ...

    @abstractmethod
    async def get(self, user_id: str, record_id: str) -> Optional[ModelT]:
        ...

    @abstractmethod
    async def update(self, user_id: str, record_id: str, updates: Dict[str, Any]) -> ModelT:
        """Apply updates; raises NotFoundError when the record is absent."""

    @abstractmethod
    async def delete(self, user_id: str, record_id: str) -> bool:
        """Delete a record; raises NotFoundError when the record is absent."""


# ── Backends ──

class MongoRecordRepository(RecordRepository[ModelT]):
    """MongoDB backend."""

    collection_name: str

    @property
    def collection(self):
        return get_database()[self.collection_name]

    def _to_model(self, doc: dict) -> ModelT:
        doc["_id"] = str(doc["_id"])
        return self.model(**doc)

    def _id_query(self, user_id: str, record_id: str) -> Optional[dict]:
        if not ObjectId.is_valid(record_id):
            return None
        return {"_id": ObjectId(record_id), "user_id": user_id}

    async def create(self, user_id: str, data: Dict[str, Any]) -> ModelT:
        record = self.build(user_id, data)
        doc = record.model_dump(exclude={"id"})
        result = await self.collection.insert_one(doc)
        logger.info("record_created", kind=self.kind, user_id=user_id, id=str(result.inserted_id))
        return record.model_copy(update={"id": str(result.inserted_id)})

    async def find(self, user_id: str, filters: Optional[Dict[str, Any]] = None) -> List[ModelT]:
        query = {"user_id": user_id, **(filters or {})}
        cursor = self.collection.find(query).sort("created_at", -1)
        records = []
        async for doc in cursor:
            records.append(self._to_model(doc))
        return records

    async def get(self, user_id: str, record_id: str) -> Optional[ModelT]:
        query = self._id_query(user_id, record_id)
        if query is None:
            return None
        doc = await self.collection.find_one(query)
        return self._to_model(doc) if doc else None

    async def update(self, user_id: str, record_id: str, updates: Dict[str, Any]) -> ModelT:
        current = await self.get(user_id, record_id)
        if current is None:
            raise NotFoundError(self.kind, record_id)

        _, fields = self.apply_update(current, updates)
        doc = await self.collection.find_one_and_update(
            self._id_query(user_id, record_id),
            {"$set": fields},
            return_document=ReturnDocument.AFTER,
        )
        if not doc:
            raise NotFoundError(self.kind, record_id)
        logger.info("record_updated", kind=self.kind, user_id=user_id, id=record_id)
        return self._to_model(doc)

    async def delete(self, user_id: str, record_id: str) -> bool:
        query = self._id_query(user_id, record_id)
        deleted = 0
        if query is not None:
            result = await self.collection.delete_one(query)
            deleted = result.deleted_count
        if deleted == 0:
            raise NotFoundError(self.kind, record_id)
        logger.info("record_deleted", kind=self.kind, user_id=user_id, id=record_id)
        return True


class InMemoryRecordRepository(RecordRepository[ModelT]):
    """Dict-backed backend for the CLI mock mode and tests."""

    def __init__(self):
        self._records: Dict[str, ModelT] = {}

    def __len__(self) -> int:
        return len(self._records)

    async def create(self, user_id: str, data: Dict[str, Any]) -> ModelT:
        record = self.build(user_id, data)
        record_id = uuid.uuid4().hex
        record = record.model_copy(update={"id": record_id})
        self._records[record_id] = record
        logger.info("record_created", kind=self.kind, user_id=user_id, id=record_id, backend="memory")
        return record

    async def find(self, user_id: str, filters: Optional[Dict[str, Any]] = None) -> List[ModelT]:
        filters = filters or {}
        matches = [
            r for r in self._records.values()
            if r.user_id == user_id
            and all(getattr(r, key, None) == value for key, value in filters.items())
        ]
        return sorted(matches, key=lambda r: r.created_at, reverse=True)

    async def get(self, user_id: str, record_id: str) -> Optional[ModelT]:
        record = self._records.get(record_id)
        if record is None or record.user_id != user_id:
            return None
        return record

    async def update(self, user_id: str, record_id: str, updates: Dict[str, Any]) -> ModelT:
        current = await self.get(user_id, record_id)
        if current is None:
            raise NotFoundError(self.kind, record_id)
        record, _ = self.apply_update(current, updates)
        self._records[record_id] = record
        return record

    async def delete(self, user_id: str, record_id: str) -> bool:
        if await self.get(user_id, record_id) is None:
            raise NotFoundError(self.kind, record_id)
        del self._records[record_id]
        return True


# ── Domain rules ──

class TaskRules:
    kind = "Task"
    model = Task

    def build(self, user_id: str, data: Dict[str, Any]) -> Task:
        data = {**data, "status": TaskStatus.PENDING}
        return super().build(user_id, data)

    def prepare_update(self, updates: Dict[str, Any]) -> Dict[str, Any]:
        prepared = super().prepare_update(updates)
        if prepared.get("status") == TaskStatus.COMPLETED and not prepared.get("completed_at"):
            prepared["completed_at"] = datetime.now()
        return prepared


class CalendarEventRules:
    kind = "Calendar event"
    model = CalendarEvent

    def build(self, user_id: str, data: Dict[str, Any]) -> CalendarEvent:
        data = dict(data)
        day = data.pop("date", None) or date.today()
        if isinstance(day, datetime):
            day = day.date()
        for key in ("start_time", "end_time"):
            value = data.get(key)
            if isinstance(value, str):
                data[key] = datetime.combine(day, _parse_clock(value))
        if data.get("is_all_day"):
            data.setdefault("start_time", datetime.combine(day, time.min))
            data.setdefault("end_time", datetime.combine(day, time.max))
        return super().build(user_id, data)


class GoalRules:
    kind = "Goal"
    model = Goal

    def build(self, user_id: str, data: Dict[str, Any]) -> Goal:
        data = {**data, "status": GoalStatus.NOT_STARTED, "progress": 0}
        return super().build(user_id, data)

    def prepare_update(self, updates: Dict[str, Any]) -> Dict[str, Any]:
        prepared = super().prepare_update(updates)
        progress = prepared.get("progress")
        if progress == 100 and not prepared.get("completed_date"):
            prepared["status"] = GoalStatus.COMPLETED
            prepared["completed_date"] = datetime.now()
        elif progress and progress > 0 and not prepared.get("start_date"):
            prepared["start_date"] = datetime.now()
            prepared["status"] = GoalStatus.IN_PROGRESS
        return prepared


class MoodEntryRules:
    """One entry per user per day: a second log on the same day updates it."""
    kind = "Mood entry"
    model = MoodEntry

    def build(self, user_id: str, data: Dict[str, Any]) -> MoodEntry:
        data = dict(data)
        day = data.get("date") or date.today()
        if isinstance(day, datetime):
            day = day.date()
        data["date"] = datetime.combine(day, time.min)
        return super().build(user_id, data)

    async def create(self, user_id: str, data: Dict[str, Any]) -> MoodEntry:
        entry = self.build(user_id, data)
        existing = await self.find(user_id, {"date": entry.date})
        if existing:
            fields = {k: v for k, v in data.items() if v is not None and k != "date"}
            return await self.update(user_id, existing[0].id, fields)
        return await super().create(user_id, data)


class TaskRepository(TaskRules, MongoRecordRepository[Task]):
    collection_name = TASKS_COLLECTION


class CalendarEventRepository(CalendarEventRules, MongoRecordRepository[CalendarEvent]):
    collection_name = CALENDAR_EVENTS_COLLECTION


class GoalRepository(GoalRules, MongoRecordRepository[Goal]):
    collection_name = GOALS_COLLECTION


class MoodEntryRepository(MoodEntryRules, MongoRecordRepository[MoodEntry]):
    collection_name = MOOD_ENTRIES_COLLECTION


class InMemoryTaskRepository(TaskRules, InMemoryRecordRepository[Task]):
    pass


class InMemoryCalendarEventRepository(CalendarEventRules, InMemoryRecordRepository[CalendarEvent]):
    pass


class InMemoryGoalRepository(GoalRules, InMemoryRecordRepository[Goal]):
    pass


class InMemoryMoodEntryRepository(MoodEntryRules, InMemoryRecordRepository[MoodEntry]):
    pass
