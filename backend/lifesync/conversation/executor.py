"""
ActionExecutor - performs confirmed candidate actions.

Dispatch is on (type, operation). Only creation exists; each create
delegates to the matching repository with the user id and the payload.
"""

import logging
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple

from lifesync.conversation.actions import ActionOperation, ActionType, CandidateAction
from lifesync.core.errors import ExecutionFailure
from lifesync.storage.repositories import RecordRepository

logger = logging.getLogger(__name__)


@dataclass
class ExecutionResult:
    """Outcome of one executed action."""
    action: CandidateAction
    success: bool
    record_id: Optional[str] = None
    error: Optional[str] = None


class ActionExecutor:
    """Routes confirmed actions to the personal stores."""

    def __init__(
        self,
        tasks: RecordRepository,
        calendar: RecordRepository,
        goals: RecordRepository,
        mood: RecordRepository,
    ):
        self._handlers: Dict[Tuple[ActionType, ActionOperation], Callable[..., Awaitable[Any]]] = {
            (ActionType.TASK, ActionOperation.CREATE): tasks.create,
            (ActionType.CALENDAR, ActionOperation.CREATE): calendar.create,
            (ActionType.GOAL, ActionOperation.CREATE): goals.create,
            (ActionType.MOOD, ActionOperation.CREATE): mood.create,
        }

    async def execute(self, user_id: str, action: CandidateAction) -> ExecutionResult:
        """
        Persist one action.

        Raises:
            ExecutionFailure: no handler for the action, or the store failed
        """
        key = (action.action_type, action.operation)
        handler = self._handlers.get(key)
        if handler is None:
            raise ExecutionFailure(
                action.type, ValueError(f"unsupported operation {action.operation.value}")
            )

        try:
            record = await handler(user_id, action.payload.model_dump())
        except Exception as e:
            logger.error(f"Error executing action {action.type}:{action.operation.value} for {user_id}: {e}")
            raise ExecutionFailure(action.type, e) from e

        logger.info(f"Executed {action.type}:{action.operation.value} for {user_id} -> {record.id}")
        return ExecutionResult(action=action, success=True, record_id=record.id)

    async def execute_many(self, user_id: str, actions: List[CandidateAction]) -> List[ExecutionResult]:
        """Execute a batch; a failing action does not stop the others."""
        results = []
        for action in actions:
            try:
                results.append(await self.execute(user_id, action))
            except ExecutionFailure as e:
                results.append(ExecutionResult(action=action, success=False, error=str(e)))
        return results
