"""
Agent API Routes

Endpoints:
- POST /api/agent/respond - Send a message, get reply + proposed actions
- POST /api/agent/execute - Persist one confirmed action
- GET /api/agent/history/{user_id} - Conversation history
- DELETE /api/agent/history/{user_id} - Forget history, mode and pending actions

`user_id` is optional everywhere and falls back to the demo user.
"""

import logging
from datetime import datetime
from typing import Any, Optional

from fastapi import APIRouter, Depends
from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from lifesync.api.dependencies import get_dialogue_manager
from lifesync.conversation.actions import parse_candidate
from lifesync.conversation.dialogue import DialogueManager
from lifesync.core.config import settings
from lifesync.core.errors import ValidationError

router = APIRouter()
logger = logging.getLogger(__name__)


# --- Request Models ---


class RespondRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(None, alias="userId")
    # Type checked by the dialogue manager so a bad message is a 400
    message: Any = None


class ExecuteRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    user_id: Optional[str] = Field(None, alias="userId")
    action: Optional[dict] = None


def _resolve_user(user_id: Optional[str]) -> str:
    return user_id or settings.DEMO_USER_ID


# --- Endpoints ---


@router.post("/respond")
async def respond(
    request: RespondRequest,
    dialogue: DialogueManager = Depends(get_dialogue_manager),
):
    """Run one conversation turn."""
    user_id = _resolve_user(request.user_id)
    result = await dialogue.process_message(user_id, request.message)

    data = result.to_dict()
    data["timestamp"] = datetime.now().isoformat()
    return {"success": True, "data": data}


@router.post("/execute")
async def execute(
    request: ExecuteRequest,
    dialogue: DialogueManager = Depends(get_dialogue_manager),
):
    """Execute an action the user confirmed in the client."""
    if not request.action:
        raise ValidationError("Action is required")

    try:
        action = parse_candidate(request.action)
    except PydanticValidationError as e:
        logger.info(f"Rejected action payload: {e.error_count()} error(s)")
        raise ValidationError(f"Invalid action: {e.errors(include_url=False)[0]['msg']}")

    user_id = _resolve_user(request.user_id)
    result = await dialogue.execute_action(user_id, action)

    return {
        "success": True,
        "message": f"{action.type.capitalize()} created successfully",
        "data": {"id": result.record_id, "type": action.type},
    }


@router.get("/history")
@router.get("/history/{user_id}")
async def get_history(
    user_id: Optional[str] = None,
    dialogue: DialogueManager = Depends(get_dialogue_manager),
):
    """Get conversation history for a user."""
    turns = await dialogue.get_history(_resolve_user(user_id))
    history = [t.to_dict() for t in turns]
    return {"success": True, "data": {"history": history, "count": len(history)}}


@router.delete("/history")
@router.delete("/history/{user_id}")
async def clear_history(
    user_id: Optional[str] = None,
    dialogue: DialogueManager = Depends(get_dialogue_manager),
):
    """Clear history, conversation mode and pending confirmations."""
    await dialogue.clear_history(_resolve_user(user_id))
    return {"success": True, "message": "Conversation history cleared"}
