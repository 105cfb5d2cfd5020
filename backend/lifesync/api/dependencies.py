"""
Shared FastAPI dependencies: repositories and the dialogue manager.

Both are process-wide singletons built lazily; tests swap them through
`app.dependency_overrides`.
"""

import logging
from typing import Dict, Optional

from fastapi import HTTPException

from lifesync.adapters.llm import LLMFactory
from lifesync.conversation.context import SessionStore
from lifesync.conversation.dialogue import DialogueManager
from lifesync.conversation.executor import ActionExecutor
from lifesync.core.config import settings
from lifesync.storage.repositories import (
    CalendarEventRepository,
    GoalRepository,
    MoodEntryRepository,
    RecordRepository,
    TaskRepository,
)

logger = logging.getLogger(__name__)

_repositories: Optional[Dict[str, RecordRepository]] = None
_dialogue_manager: Optional[DialogueManager] = None


def get_repositories() -> Dict[str, RecordRepository]:
    """Repositories keyed by store name (tasks, calendar, goals, mood)."""
    global _repositories
    if _repositories is None:
        _repositories = {
            "tasks": TaskRepository(),
            "calendar": CalendarEventRepository(),
            "goals": GoalRepository(),
            "mood": MoodEntryRepository(),
        }
    return _repositories


async def get_dialogue_manager() -> DialogueManager:
    """Get or create the dialogue manager singleton."""
    global _dialogue_manager

    if _dialogue_manager is None:
        try:
            llm = LLMFactory.from_settings(settings)
        except Exception as e:
            logger.error(f"Failed to create LLM client: {e}")
            raise HTTPException(status_code=500, detail="LLM service unavailable")

        repos = get_repositories()
        executor = ActionExecutor(
            tasks=repos["tasks"],
            calendar=repos["calendar"],
            goals=repos["goals"],
            mood=repos["mood"],
        )
        sessions = SessionStore(
            ttl_seconds=settings.SESSION_TTL_SECONDS,
            max_turns=settings.MAX_HISTORY_TURNS,
        )
        _dialogue_manager = DialogueManager(
            llm_client=llm,
            executor=executor,
            sessions=sessions,
            generation_timeout=settings.GENERATION_TIMEOUT_SECONDS,
            pending_ttl_seconds=settings.PENDING_CONFIRMATION_TTL_SECONDS,
        )

        # Connect to Redis for session storage
        try:
            await _dialogue_manager.connect(settings.REDIS_URL)
        except Exception as e:
            logger.warning(f"Session store Redis not available: {e}")

        logger.info("DialogueManager initialized")

    return _dialogue_manager


async def close_dialogue_manager():
    global _dialogue_manager
    if _dialogue_manager is not None:
        await _dialogue_manager.close()
        _dialogue_manager = None
