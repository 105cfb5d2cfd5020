"""
DialogueSequencer - one-at-a-time confirmation of candidate actions.

State machine per user:
    IDLE → AWAITING_CONFIRMATION → (next action | IDLE)

Only the current action is ever shown or executed; queued actions get
their turn by becoming current. A reply that is neither a yes nor a no
is not handled here: it goes back to the orchestrator as a new turn.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Callable, Dict, List, Optional, Set, Tuple

from lifesync.conversation.actions import ActionType, CandidateAction
from lifesync.conversation.context import PendingQueue
from lifesync.conversation.executor import ActionExecutor, ExecutionResult
from lifesync.core.errors import ExecutionFailure

logger = logging.getLogger(__name__)


class SequencerState(str, Enum):
    IDLE = "idle"
    AWAITING_CONFIRMATION = "awaiting_confirmation"


class ReplyIntent(str, Enum):
    CONFIRM = "confirm"
    REJECT = "reject"
    OTHER = "other"


# Stripped from the end of a reply before matching
TRAILING_PUNCTUATION = " .!?,;:"

CONFIRM_REPLIES: Set[str] = {"yes", "yep", "sure", "ok", "okay"}
REJECT_REPLIES: Set[str] = {"no", "nope", "not now", "skip"}

_OFFERS: Dict[ActionType, Callable[[CandidateAction], str]] = {
    ActionType.TASK: lambda a: f'add "{a.payload.title}" to your tasks',
    ActionType.CALENDAR: lambda a: f'add "{a.payload.title}" to your calendar',
    ActionType.MOOD: lambda a: f'log your mood as "{a.payload.mood.value}"',
    ActionType.GOAL: lambda a: f'set a goal: "{a.payload.title}"',
}

_RECEIPTS: Dict[ActionType, Callable[[CandidateAction], str]] = {
    ActionType.TASK: lambda a: f'I added "{a.payload.title}" to your tasks.',
    ActionType.CALENDAR: lambda a: f'I added "{a.payload.title}" to your calendar.',
    ActionType.MOOD: lambda a: f'I logged your mood as "{a.payload.mood.value}".',
    ActionType.GOAL: lambda a: f'I set your goal: "{a.payload.title}".',
}

CLOSING_AFTER_CONFIRM = "🎉 All done! Let me know if you'd like to organize anything else."
CLOSING_AFTER_REJECT = "Okay, let me know if you want to do anything else!"


@dataclass
class SequencerResult:
    """What the user sees after a yes/no."""
    message: str
    state: SequencerState
    current: Optional[CandidateAction] = None
    prompt: Optional[str] = None
    execution: Optional[ExecutionResult] = None


def _subject(action: CandidateAction) -> str:
    if action.action_type == ActionType.MOOD:
        return action.payload.mood.value
    return action.payload.title


class DialogueSequencer:
    """Drives a user's PendingQueue through confirm / reject replies."""

    def __init__(self, executor: ActionExecutor):
        self.executor = executor

    @staticmethod
    def classify_reply(text: str) -> ReplyIntent:
        cleaned = text.strip().lower().rstrip(TRAILING_PUNCTUATION)
        if cleaned in CONFIRM_REPLIES:
            return ReplyIntent.CONFIRM
        if cleaned in REJECT_REPLIES:
            return ReplyIntent.REJECT
        return ReplyIntent.OTHER

    @staticmethod
    def state_of(queue: PendingQueue) -> SequencerState:
        if queue.is_awaiting:
            return SequencerState.AWAITING_CONFIRMATION
        return SequencerState.IDLE

    @staticmethod
    def prompt_for(action: CandidateAction) -> str:
        offer = _OFFERS.get(action.action_type, lambda a: "perform this action")
        return f"Would you like me to {offer(action)}?"

    def begin(self, queue: PendingQueue, candidates: List[CandidateAction]) -> Optional[str]:
        """Load a batch and return the prompt for its first action."""
        if queue.is_awaiting:
            logger.info(f"Replacing {len(queue)} pending action(s) with a new batch")
        queue.load(candidates)
        if queue.current is None:
            return None
        return self.prompt_for(queue.current)

    async def confirm(self, user_id: str, queue: PendingQueue) -> SequencerResult:
        """Execute the current action, then advance."""
        action = queue.current
        if action is None:
            return SequencerResult(message=CLOSING_AFTER_REJECT, state=SequencerState.IDLE)

        try:
            execution = await self.executor.execute(user_id, action)
            message = f"✅ Done! {_RECEIPTS[action.action_type](action)}"
        except ExecutionFailure as e:
            logger.warning(f"Confirmed action failed for {user_id}: {e}")
            execution = ExecutionResult(action=action, success=False, error=str(e))
            message = f'⚠️ Sorry, I couldn\'t save "{_subject(action)}". Please try again later.'

        nxt, prompt = self._advance(queue)
        if nxt is None:
            return SequencerResult(
                message=f"{message}\n\n{CLOSING_AFTER_CONFIRM}",
                state=SequencerState.IDLE,
                execution=execution,
            )
        return SequencerResult(
            message=f"{message}\n\n{prompt}",
            state=SequencerState.AWAITING_CONFIRMATION,
            current=nxt,
            prompt=prompt,
            execution=execution,
        )

    def reject(self, queue: PendingQueue) -> SequencerResult:
        """Discard the current action without executing it, then advance."""
        if queue.current is not None:
            logger.info(f"Skipped {queue.current.type} action")

        nxt, prompt = self._advance(queue)
        if nxt is None:
            return SequencerResult(
                message=f"No problem! {CLOSING_AFTER_REJECT}",
                state=SequencerState.IDLE,
            )
        return SequencerResult(
            message=f"No problem! {prompt}",
            state=SequencerState.AWAITING_CONFIRMATION,
            current=nxt,
            prompt=prompt,
        )

    def settle(self, queue: PendingQueue, action: CandidateAction) -> bool:
        """Drop an action the client executed directly so it is not offered again."""
        settled = queue.discard(action)
        if settled:
            logger.info(f"Settled pending {action.type} action executed by the client")
        return settled

    def expire(self, queue: PendingQueue):
        """Abandon a confirmation nobody answered."""
        logger.info(f"Dropping {len(queue)} stale pending action(s)")
        queue.clear()

    def _advance(self, queue: PendingQueue) -> Tuple[Optional[CandidateAction], Optional[str]]:
        nxt = queue.advance()
        if nxt is None:
            return None, None
        return nxt, self.prompt_for(nxt)
