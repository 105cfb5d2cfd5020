"""
ConversationOrchestrator - one free-text turn, end to end.

    received → classified → mode-gated → generated
             → (extraction skipped | extracted) → assembled

The reply never executes anything: candidates come back as pending
confirmations and `actions` is always empty.
"""

import asyncio
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from lifesync.adapters.llm import LLMClientInterface
from lifesync.conversation.actions import CandidateAction, dump_candidate
from lifesync.conversation.context import ConversationTurn, SessionStore
from lifesync.conversation.emotion import AffectState, EmotionClassifier
from lifesync.conversation.extractor import ActionExtractor
from lifesync.conversation.suggestions import SuggestionGenerator
from lifesync.core.errors import GenerationFailure, ProcessingFailure, ValidationError
from lifesync.core.prompts import PromptManager

logger = logging.getLogger(__name__)

FALLBACK_MESSAGE = "Sorry, I couldn't generate a response. Please try again."
DEFAULT_CONFIDENCE = 0.85


@dataclass
class AIResponse:
    """Envelope returned for every turn."""
    message: str
    actions: List[CandidateAction] = field(default_factory=list)
    suggestions: List[str] = field(default_factory=list)
    confidence: float = DEFAULT_CONFIDENCE
    pending_confirmations: Optional[List[CandidateAction]] = None

    def to_dict(self) -> dict:
        data = {
            "message": self.message,
            "actions": [dump_candidate(a) for a in self.actions],
            "suggestions": list(self.suggestions),
            "confidence": self.confidence,
        }
        if self.pending_confirmations is not None:
            data["pendingConfirmations"] = [dump_candidate(a) for a in self.pending_confirmations]
        return data


class ConversationOrchestrator:
    """
    Classifies, generates, gates and extracts for one user message.

    The mode is written to the session store before generation and read
    back for gating; the caller holds the user's lock for the whole turn.
    """

    def __init__(
        self,
        llm_client: LLMClientInterface,
        sessions: SessionStore,
        classifier: Optional[EmotionClassifier] = None,
        extractor: Optional[ActionExtractor] = None,
        suggester: Optional[SuggestionGenerator] = None,
        generation_timeout: float = 20.0,
    ):
        self.llm = llm_client
        self.sessions = sessions
        self.classifier = classifier or EmotionClassifier()
        self.extractor = extractor or ActionExtractor()
        self.suggester = suggester or SuggestionGenerator()
        self.generation_timeout = generation_timeout

    async def respond(self, user_id: str, text: str) -> AIResponse:
        """
        Process one free-text turn.

        Raises:
            ValidationError: text is not a non-empty string
            ProcessingFailure: generation timed out or anything else broke
        """
        if not isinstance(text, str) or not text.strip():
            raise ValidationError("Message is required and must be a string")

        logger.info(f"Processing user input for {user_id}: {text}")

        try:
            return await self._respond(user_id, text)
        except ProcessingFailure:
            raise
        except Exception as e:
            logger.error(f"Error processing user input for {user_id} ({text!r}): {e}")
            raise ProcessingFailure("Failed to process user input", e) from e

    async def _respond(self, user_id: str, text: str) -> AIResponse:
        mode = self.classifier.classify(text)
        await self.sessions.set_mode(user_id, mode)

        try:
            reply = await self._generate_reply(user_id, text, mode)
        except GenerationFailure as e:
            logger.error(f"{e} for {user_id}")
            await self.sessions.append_turn(ConversationTurn(user_id=user_id, input_text=text, mode=mode))
            return AIResponse(message=FALLBACK_MESSAGE, confidence=0)

        mode = await self.sessions.get_mode(user_id)
        if mode == AffectState.EMOTIONAL:
            response = self._emotional_response(text, reply)
        else:
            response = self._neutral_response(user_id, text, reply)

        await self.sessions.append_turn(
            ConversationTurn(user_id=user_id, input_text=text, mode=mode, reply=reply)
        )
        logger.info(
            f"AI response generated for {user_id}: mode={mode.value}, "
            f"pending={len(response.pending_confirmations or [])}, suggestions={len(response.suggestions)}"
        )
        return response

    async def _generate_reply(self, user_id: str, text: str, mode: AffectState) -> str:
        session = await self.sessions.get(user_id)
        prompt = PromptManager.get_prompt(
            "ASSISTANT_REPLY",
            mode=mode.value,
            history=session.get_history_text() or "(none)",
            input=text,
        )

        try:
            reply = await asyncio.wait_for(
                self.llm.generate(prompt, system_instruction=PromptManager.ASSISTANT_PERSONA),
                timeout=self.generation_timeout,
            )
        except asyncio.TimeoutError as e:
            logger.error(f"Generation timed out after {self.generation_timeout}s for {user_id} ({text!r})")
            raise ProcessingFailure("Language model timed out", e) from e
        except Exception as e:
            logger.error(f"Generation failed for {user_id} ({text!r}): {e}")
            raise ProcessingFailure("Failed to process user input", e) from e

        if not reply or not reply.strip():
            raise GenerationFailure("AI model returned no response")
        return reply.strip()

    def _emotional_response(self, text: str, reply: str) -> AIResponse:
        # Listening register: never propose actions, whatever else the text says
        suggestions = self.suggester.gentle() if self.classifier.wants_comfort(text) else []
        return AIResponse(
            message=reply,
            suggestions=suggestions,
            pending_confirmations=[],
        )

    def _neutral_response(self, user_id: str, text: str, reply: str) -> AIResponse:
        candidates = self.extractor.extract(user_id, text, reply)
        suggestions = self.suggester.suggest(user_id, text)
        return AIResponse(
            message=reply,
            suggestions=suggestions,
            pending_confirmations=candidates or None,
        )
