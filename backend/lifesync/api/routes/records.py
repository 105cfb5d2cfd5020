"""
Personal store routes: tasks, calendar events, goals, mood entries.

One router per store, all with the same shape:
list (with equality filters), get, create, update, delete.
"""

import logging
from typing import Any, Callable, Dict, Optional

from fastapi import APIRouter, Body, Depends, Query

from lifesync.api.dependencies import get_repositories
from lifesync.core.config import settings
from lifesync.core.errors import NotFoundError, ValidationError
from lifesync.storage.repositories import RecordRepository

logger = logging.getLogger(__name__)

# Query parameters accepted as filters on list, per store
LIST_FILTERS = {
    "tasks": ("status", "priority"),
    "calendar": ("type",),
    "goals": ("status", "category"),
    "mood": ("mood",),
}


def _repository(store: str) -> Callable[..., RecordRepository]:
    def dependency(repos: Dict[str, RecordRepository] = Depends(get_repositories)) -> RecordRepository:
        return repos[store]
    return dependency


def _serialize(record) -> dict:
    return record.model_dump(mode="json", by_alias=True)


def build_router(store: str) -> APIRouter:
    router = APIRouter()
    get_repo = _repository(store)
    allowed_filters = LIST_FILTERS[store]

    @router.get("")
    async def list_records(
        user_id: Optional[str] = Query(None, alias="userId"),
        status: Optional[str] = None,
        priority: Optional[str] = None,
        type: Optional[str] = None,
        category: Optional[str] = None,
        mood: Optional[str] = None,
        repo: RecordRepository = Depends(get_repo),
    ):
        candidates = {
            "status": status,
            "priority": priority,
            "type": type,
            "category": category,
            "mood": mood,
        }
        filters = {
            key: value for key, value in candidates.items()
            if value is not None and key in allowed_filters
        }
        records = await repo.find(user_id or settings.DEMO_USER_ID, filters)
        items = [_serialize(r) for r in records]
        return {"success": True, "data": items, "count": len(items)}

    @router.get("/{record_id}")
    async def get_record(
        record_id: str,
        user_id: Optional[str] = Query(None, alias="userId"),
        repo: RecordRepository = Depends(get_repo),
    ):
        record = await repo.get(user_id or settings.DEMO_USER_ID, record_id)
        if record is None:
            raise NotFoundError(repo.kind, record_id)
        return {"success": True, "data": _serialize(record)}

    @router.post("", status_code=201)
    async def create_record(
        payload: Dict[str, Any] = Body(...),
        user_id: Optional[str] = Query(None, alias="userId"),
        repo: RecordRepository = Depends(get_repo),
    ):
        try:
            record = await repo.create(user_id or settings.DEMO_USER_ID, payload)
        except ValueError as e:
            # pydantic errors subclass ValueError
            raise ValidationError(f"Invalid {repo.kind.lower()}: {e}")
        return {"success": True, "data": _serialize(record)}

    @router.patch("/{record_id}")
    async def update_record(
        record_id: str,
        updates: Dict[str, Any] = Body(...),
        user_id: Optional[str] = Query(None, alias="userId"),
        repo: RecordRepository = Depends(get_repo),
    ):
        try:
            record = await repo.update(user_id or settings.DEMO_USER_ID, record_id, updates)
        except ValueError as e:
            raise ValidationError(f"Invalid {repo.kind.lower()} update: {e}")
        return {"success": True, "data": _serialize(record)}

    @router.delete("/{record_id}")
    async def delete_record(
        record_id: str,
        user_id: Optional[str] = Query(None, alias="userId"),
        repo: RecordRepository = Depends(get_repo),
    ):
        await repo.delete(user_id or settings.DEMO_USER_ID, record_id)
        return {"success": True, "message": f"{repo.kind} deleted"}

    return router


tasks = build_router("tasks")
calendar = build_router("calendar")
goals = build_router("goals")
mood = build_router("mood")
