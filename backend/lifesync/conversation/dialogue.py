"""
DialogueManager - routes each user message.

While an action is awaiting confirmation, a yes/no reply goes to the
sequencer; anything else is a fresh turn for the orchestrator, whose
candidates (if any) replace the pending queue. Turns of one user are
serialized with the session store's per-user lock.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional

from lifesync.adapters.llm import LLMClientInterface
from lifesync.conversation.actions import CandidateAction, dump_candidate
from lifesync.conversation.context import ConversationTurn, SessionStore, UserSession
from lifesync.conversation.executor import ActionExecutor, ExecutionResult
from lifesync.conversation.orchestrator import AIResponse, ConversationOrchestrator
from lifesync.conversation.sequencer import (
    DialogueSequencer,
    ReplyIntent,
    SequencerResult,
    SequencerState,
)
from lifesync.core.errors import ValidationError

logger = logging.getLogger(__name__)

# Yes/no handling is deterministic
SEQUENCER_CONFIDENCE = 1.0


@dataclass
class DialogueResponse:
    """Response from the dialogue manager."""
    response: AIResponse
    state: SequencerState
    confirmation_prompt: Optional[str] = None
    current_action: Optional[CandidateAction] = None
    execution: Optional[ExecutionResult] = None

    @property
    def message(self) -> str:
        return self.response.message

    def to_dict(self) -> dict:
        data = self.response.to_dict()
        data["state"] = self.state.value
        data["confirmationPrompt"] = self.confirmation_prompt
        data["currentAction"] = dump_candidate(self.current_action) if self.current_action else None
        return data


class DialogueManager:
    """
    Manages the conversation for every user.

    State machine per user (see DialogueSequencer):
    IDLE → AWAITING_CONFIRMATION → (next action | IDLE)
    """

    def __init__(
        self,
        llm_client: LLMClientInterface,
        executor: ActionExecutor,
        sessions: Optional[SessionStore] = None,
        generation_timeout: float = 20.0,
        pending_ttl_seconds: int = 3600,
    ):
        self.sessions = sessions or SessionStore()
        self.executor = executor
        self.orchestrator = ConversationOrchestrator(
            llm_client, self.sessions, generation_timeout=generation_timeout
        )
        self.sequencer = DialogueSequencer(executor)
        self.pending_ttl_seconds = pending_ttl_seconds

    async def connect(self, redis_url: str = "redis://localhost:6379/0"):
        """Initialize connections."""
        await self.sessions.connect(redis_url)

    async def close(self):
        """Cleanup."""
        await self.sessions.close()

    async def process_message(self, user_id: str, message: str) -> DialogueResponse:
        """Process a user message and generate response."""
        if not isinstance(message, str) or not message.strip():
            raise ValidationError("Message is required and must be a string")

        async with self.sessions.lock(user_id):
            session = await self.sessions.get(user_id)

            if session.pending.is_expired(self.pending_ttl_seconds):
                self.sequencer.expire(session.pending)
                await self.sessions.save(session)

            if session.pending.is_awaiting:
                intent = self.sequencer.classify_reply(message)
                if intent == ReplyIntent.CONFIRM:
                    result = await self.sequencer.confirm(user_id, session.pending)
                    return await self._reply_from_sequencer(session, message, result)
                if intent == ReplyIntent.REJECT:
                    result = self.sequencer.reject(session.pending)
                    return await self._reply_from_sequencer(session, message, result)

            response = await self.orchestrator.respond(user_id, message)

            session = await self.sessions.get(user_id)
            prompt = None
            if response.pending_confirmations:
                prompt = self.sequencer.begin(session.pending, response.pending_confirmations)
                await self.sessions.save(session)

            return DialogueResponse(
                response=response,
                state=self.sequencer.state_of(session.pending),
                confirmation_prompt=prompt,
                current_action=session.pending.current,
            )

    async def _reply_from_sequencer(
        self,
        session: UserSession,
        message: str,
        result: SequencerResult,
    ) -> DialogueResponse:
        session.add_turn(
            ConversationTurn(
                user_id=session.user_id,
                input_text=message,
                mode=session.mode,
                reply=result.message,
            )
        )
        await self.sessions.save(session)

        return DialogueResponse(
            response=AIResponse(message=result.message, confidence=SEQUENCER_CONFIDENCE),
            state=result.state,
            confirmation_prompt=result.prompt,
            current_action=result.current,
            execution=result.execution,
        )

    async def execute_action(self, user_id: str, action: CandidateAction) -> ExecutionResult:
        """
        Execute an action the client confirmed on its own (raises ExecutionFailure).

        Runs under the user's lock; if the action is pending it leaves the
        queue, so a later "yes" cannot save it again.
        """
        async with self.sessions.lock(user_id):
            result = await self.executor.execute(user_id, action)

            session = await self.sessions.get(user_id)
            if self.sequencer.settle(session.pending, action):
                await self.sessions.save(session)
            return result

    async def get_history(self, user_id: str) -> List[ConversationTurn]:
        return await self.sessions.get_history(user_id)

    async def clear_history(self, user_id: str):
        """Forget the conversation, reset the mode and drop pending actions."""
        async with self.sessions.lock(user_id):
            await self.sessions.clear(user_id)
