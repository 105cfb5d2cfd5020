"""
Test script for the conversation flow: orchestrator, sequencer, dialogue manager.

Tests:
1. Orchestrator - emotional gating, neutral extraction, fallback, timeout
2. Candidate wire format - create-only, legacy keys
3. Executor - batch isolation
4. DialogueManager - yes/no confirmation, queue drain, expiry, history

Usage:
    python scripts/test_dialogue.py
"""

import asyncio
import json
import logging
import sys
from datetime import datetime, timedelta
from pathlib import Path
from typing import List, Optional

from pydantic import ValidationError as PydanticValidationError

sys.path.insert(0, str(Path(__file__).parent.parent))

from lifesync.adapters.llm import LLMClientInterface
from lifesync.conversation.actions import (
    TaskAction,
    TaskPayload,
    MoodAction,
    MoodPayload,
    dump_candidate,
    parse_candidate,
)
from lifesync.conversation.context import SessionStore, UserSession
from lifesync.conversation.dialogue import DialogueManager
from lifesync.conversation.emotion import AffectState
from lifesync.conversation.executor import ActionExecutor
from lifesync.conversation.orchestrator import FALLBACK_MESSAGE, ConversationOrchestrator
from lifesync.conversation.sequencer import (
    CLOSING_AFTER_CONFIRM,
    CLOSING_AFTER_REJECT,
    ReplyIntent,
    DialogueSequencer,
    SequencerState,
)
from lifesync.conversation.suggestions import GENTLE_SUGGESTIONS
from lifesync.core.errors import ExecutionFailure, ProcessingFailure, ValidationError
from lifesync.core.models import Mood
from lifesync.storage.repositories import (
    InMemoryCalendarEventRepository,
    InMemoryGoalRepository,
    InMemoryMoodEntryRepository,
    InMemoryTaskRepository,
)

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
)
logger = logging.getLogger(__name__)


class MockLLMClient(LLMClientInterface):
    """Mock LLM for testing."""

    def __init__(self, reply: str = "Sounds good, let's sort that out.", delay: float = 0.0):
        self.reply = reply
        self.delay = delay
        self.prompts: List[str] = []

    async def generate(self, prompt: str, system_instruction: Optional[str] = None) -> str:
        self.prompts.append(prompt)
        if self.delay:
            await asyncio.sleep(self.delay)
        return self.reply


class FailingTaskRepository(InMemoryTaskRepository):
    async def create(self, user_id, data):
        raise RuntimeError("database unavailable")


class SlowTaskRepository(InMemoryTaskRepository):
    async def create(self, user_id, data):
        await asyncio.sleep(0.01)
        return await super().create(user_id, data)


class Stores:
    def __init__(self, tasks=None):
        self.tasks = tasks if tasks is not None else InMemoryTaskRepository()
        self.calendar = InMemoryCalendarEventRepository()
        self.goals = InMemoryGoalRepository()
        self.mood = InMemoryMoodEntryRepository()

    def executor(self) -> ActionExecutor:
        return ActionExecutor(
            tasks=self.tasks, calendar=self.calendar, goals=self.goals, mood=self.mood
        )


def make_manager(stores: Stores, llm: Optional[MockLLMClient] = None, **kwargs) -> DialogueManager:
    return DialogueManager(
        llm_client=llm or MockLLMClient(),
        executor=stores.executor(),
        sessions=SessionStore(),
        **kwargs,
    )


# --- Orchestrator ---


def test_emotional_turn_proposes_nothing():
    """An overwhelmed user gets no actions even if the text mentions chores."""
    async def run():
        sessions = SessionStore()
        orchestrator = ConversationOrchestrator(MockLLMClient("I hear you."), sessions)
        response = await orchestrator.respond(
            "u1", "I'm feeling overwhelmed with my exam on Thursday and laundry's piling up."
        )
        assert response.pending_confirmations == []
        assert response.suggestions == []
        assert response.actions == []
        assert response.message == "I hear you."
        assert await sessions.get_mode("u1") == AffectState.EMOTIONAL

    asyncio.run(run())


def test_emotional_turn_asking_for_help_gets_gentle_suggestions():
    async def run():
        orchestrator = ConversationOrchestrator(MockLLMClient(), SessionStore())
        response = await orchestrator.respond("u1", "I'm so sad, please help")
        assert response.pending_confirmations == []
        assert response.suggestions == GENTLE_SUGGESTIONS

    asyncio.run(run())


def test_neutral_turn_extracts_and_suggests():
    async def run():
        llm = MockLLMClient()
        sessions = SessionStore()
        orchestrator = ConversationOrchestrator(llm, sessions)
        response = await orchestrator.respond(
            "u1", "I need to schedule a study session for tomorrow, exam on Friday"
        )
        assert [a.type for a in response.pending_confirmations] == ["task", "calendar"]
        assert response.pending_confirmations[0].payload.title == "Study for exam Friday"
        assert response.suggestions
        assert response.actions == []
        assert response.confidence == 0.85
        assert "Current mode: neutral" in llm.prompts[0]

        data = response.to_dict()
        assert data["pendingConfirmations"][0]["payload"]["aiSuggested"] is True

    asyncio.run(run())


def test_neutral_turn_without_candidates_omits_pending():
    async def run():
        orchestrator = ConversationOrchestrator(MockLLMClient(), SessionStore())
        response = await orchestrator.respond("u1", "What a nice day")
        assert response.pending_confirmations is None
        assert "pendingConfirmations" not in response.to_dict()

    asyncio.run(run())


def test_mode_does_not_carry_over():
    async def run():
        sessions = SessionStore()
        orchestrator = ConversationOrchestrator(MockLLMClient(), sessions)
        await orchestrator.respond("u1", "I feel hopeless")
        response = await orchestrator.respond("u1", "laundry")
        assert await sessions.get_mode("u1") == AffectState.NEUTRAL
        assert response.pending_confirmations[0].payload.title == "Do laundry"

    asyncio.run(run())


def test_empty_generation_falls_back():
    async def run():
        sessions = SessionStore()
        orchestrator = ConversationOrchestrator(MockLLMClient(reply="   "), sessions)
        response = await orchestrator.respond("u1", "laundry")
        assert response.message == FALLBACK_MESSAGE
        assert response.confidence == 0
        assert response.pending_confirmations is None

        history = await sessions.get_history("u1")
        assert len(history) == 1
        assert history[0].reply is None

    asyncio.run(run())


def test_generation_timeout_is_processing_failure():
    async def run():
        orchestrator = ConversationOrchestrator(
            MockLLMClient(delay=1.0), SessionStore(), generation_timeout=0.05
        )
        try:
            await orchestrator.respond("u1", "hello")
        except ProcessingFailure:
            return
        raise AssertionError("expected ProcessingFailure")

    asyncio.run(run())


def test_invalid_message_is_rejected():
    async def run():
        orchestrator = ConversationOrchestrator(MockLLMClient(), SessionStore())
        for bad in (None, 42, "", "   "):
            try:
                await orchestrator.respond("u1", bad)
            except ValidationError:
                continue
            raise AssertionError(f"expected ValidationError for {bad!r}")

    asyncio.run(run())


# --- Wire format ---


def test_update_and_delete_candidates_are_rejected():
    for operation in ("update", "delete"):
        try:
            parse_candidate({"type": "task", "operation": operation, "payload": {"title": "x"}})
        except PydanticValidationError:
            continue
        raise AssertionError(f"{operation} candidate should not validate")


def test_legacy_client_keys_are_accepted():
    action = parse_candidate({"type": "task", "action": "create", "data": {"title": "Do laundry"}})
    assert isinstance(action, TaskAction)
    assert action.payload.title == "Do laundry"


def test_candidate_round_trip():
    action = MoodAction(payload=MoodPayload(mood=Mood.TIRED, energy=2, ai_context="tired"))
    wire = dump_candidate(action)
    assert wire["type"] == "mood"
    assert wire["payload"]["aiContext"] == "tired"
    assert parse_candidate(wire) == action


# --- Executor ---


def test_batch_execution_isolates_failures():
    async def run():
        stores = Stores(tasks=FailingTaskRepository())
        actions = [
            TaskAction(payload=TaskPayload(title="Do laundry")),
            MoodAction(payload=MoodPayload(mood=Mood.HAPPY, energy=4)),
        ]
        results = await stores.executor().execute_many("u1", actions)
        assert [r.success for r in results] == [False, True]
        assert "database unavailable" in results[0].error
        assert len(stores.mood) == 1

    asyncio.run(run())


def test_single_execution_raises_execution_failure():
    async def run():
        executor = Stores(tasks=FailingTaskRepository()).executor()
        try:
            await executor.execute("u1", TaskAction(payload=TaskPayload(title="Do laundry")))
        except ExecutionFailure as e:
            assert e.action_type == "task"
            return
        raise AssertionError("expected ExecutionFailure")

    asyncio.run(run())


# --- Sequencer ---


def test_reply_classification():
    assert DialogueSequencer.classify_reply(" Yes! ") == ReplyIntent.CONFIRM
    assert DialogueSequencer.classify_reply("okay.") == ReplyIntent.CONFIRM
    assert DialogueSequencer.classify_reply("ok?") == ReplyIntent.CONFIRM
    assert DialogueSequencer.classify_reply("yes,") == ReplyIntent.CONFIRM
    assert DialogueSequencer.classify_reply("Skip; ") == ReplyIntent.REJECT
    assert DialogueSequencer.classify_reply("Not now") == ReplyIntent.REJECT
    assert DialogueSequencer.classify_reply("yes please add it tomorrow") == ReplyIntent.OTHER


# --- DialogueManager ---


def test_confirming_single_candidate_persists_one_task():
    async def run():
        stores = Stores()
        manager = make_manager(stores)

        first = await manager.process_message("u1", "laundry")
        assert first.state == SequencerState.AWAITING_CONFIRMATION
        assert first.confirmation_prompt == 'Would you like me to add "Do laundry" to your tasks?'

        second = await manager.process_message("u1", "yes")
        assert second.state == SequencerState.IDLE
        assert second.message.endswith(CLOSING_AFTER_CONFIRM)
        assert second.execution.success
        assert len(stores.tasks) == 1

        task = await stores.tasks.get("u1", second.execution.record_id)
        assert task.title == "Do laundry"
        assert task.ai_suggested is True
        assert task.ai_context == "laundry"

    asyncio.run(run())


def test_reject_then_confirm_drains_queue():
    async def run():
        stores = Stores()
        manager = make_manager(stores)

        first = await manager.process_message("u1", "I need to do groceries and I'm tired")
        assert [a.type for a in first.response.pending_confirmations] == ["task", "mood"]
        assert first.current_action.type == "task"

        second = await manager.process_message("u1", "no")
        assert second.state == SequencerState.AWAITING_CONFIRMATION
        assert second.message == 'No problem! Would you like me to log your mood as "Tired"?'
        assert second.execution is None

        third = await manager.process_message("u1", "yes")
        assert third.state == SequencerState.IDLE
        assert len(stores.tasks) == 0
        assert len(stores.mood) == 1

    asyncio.run(run())


def test_reject_last_candidate_closes():
    async def run():
        manager = make_manager(Stores())
        await manager.process_message("u1", "laundry")
        result = await manager.process_message("u1", "nope")
        assert result.message == f"No problem! {CLOSING_AFTER_REJECT}"
        assert result.state == SequencerState.IDLE

    asyncio.run(run())


def test_failed_execution_still_advances():
    async def run():
        stores = Stores(tasks=FailingTaskRepository())
        manager = make_manager(stores)
        await manager.process_message("u1", "laundry and I'm happy")
        result = await manager.process_message("u1", "yes")
        assert result.message.startswith("⚠️")
        assert not result.execution.success
        assert result.state == SequencerState.AWAITING_CONFIRMATION
        assert result.current_action.type == "mood"

    asyncio.run(run())


def test_yes_without_pending_is_a_normal_turn():
    async def run():
        stores = Stores()
        manager = make_manager(stores)
        result = await manager.process_message("u1", "yes")
        assert result.state == SequencerState.IDLE
        assert result.message == "Sounds good, let's sort that out."
        assert len(stores.tasks) == 0

    asyncio.run(run())


def test_free_text_keeps_pending_when_no_new_candidates():
    async def run():
        manager = make_manager(Stores())
        await manager.process_message("u1", "laundry")
        result = await manager.process_message("u1", "what's the weather like")
        assert result.state == SequencerState.AWAITING_CONFIRMATION
        assert result.current_action.payload.title == "Do laundry"

    asyncio.run(run())


def test_new_candidates_replace_pending_queue():
    async def run():
        manager = make_manager(Stores())
        await manager.process_message("u1", "laundry")
        result = await manager.process_message("u1", "I should take a bath")
        assert result.current_action.payload.title == "Take a Bath"
        session = await manager.sessions.get("u1")
        assert len(session.pending) == 1

    asyncio.run(run())


def test_stale_confirmation_expires():
    async def run():
        stores = Stores()
        manager = make_manager(stores, pending_ttl_seconds=3600)
        await manager.process_message("u1", "laundry")

        session = await manager.sessions.get("u1")
        session.pending.awaiting_since = datetime.now() - timedelta(hours=2)

        result = await manager.process_message("u1", "yes")
        assert result.state == SequencerState.IDLE
        assert len(stores.tasks) == 0

    asyncio.run(run())


def test_history_and_clear():
    async def run():
        manager = make_manager(Stores())
        await manager.process_message("u1", "laundry")
        await manager.process_message("u1", "yes")
        await manager.process_message("u2", "hello")

        history = await manager.get_history("u1")
        assert [t.input_text for t in history] == ["laundry", "yes"]
        assert history[1].reply.startswith("✅ Done!")

        await manager.clear_history("u1")
        assert await manager.get_history("u1") == []
        assert len(await manager.get_history("u2")) == 1
        session = await manager.sessions.get("u1")
        assert not session.pending.is_awaiting

    asyncio.run(run())


def test_concurrent_confirmations_save_once():
    """Two "yes" replies racing for one pending action persist it once."""
    async def run():
        stores = Stores(tasks=SlowTaskRepository())
        manager = make_manager(stores)
        await manager.process_message("u1", "laundry")

        results = await asyncio.gather(
            manager.process_message("u1", "yes"),
            manager.process_message("u1", "yes"),
        )
        assert len(stores.tasks) == 1
        assert sum(1 for r in results if r.execution is not None) == 1
        session = await manager.sessions.get("u1")
        assert not session.pending.is_awaiting

    asyncio.run(run())


def test_client_execution_settles_pending_action():
    """An action executed directly is not offered or saved again."""
    async def run():
        stores = Stores()
        manager = make_manager(stores)
        first = await manager.process_message("u1", "laundry and I'm happy")
        task_action = first.current_action

        await manager.execute_action("u1", parse_candidate(dump_candidate(task_action)))
        session = await manager.sessions.get("u1")
        assert session.pending.current.type == "mood"

        result = await manager.process_message("u1", "yes")
        assert result.state == SequencerState.IDLE
        assert len(stores.tasks) == 1
        assert len(stores.mood) == 1

    asyncio.run(run())


def test_executing_unrelated_action_keeps_queue():
    async def run():
        manager = make_manager(Stores())
        await manager.process_message("u1", "laundry")
        await manager.execute_action("u1", TaskAction(payload=TaskPayload(title="Something else")))
        session = await manager.sessions.get("u1")
        assert session.pending.current.payload.title == "Do laundry"

    asyncio.run(run())


# --- Session store ---


def test_session_survives_serialization():
    """Sessions written to Redis come back with their queue and history."""
    async def run():
        stores = Stores()
        manager = make_manager(stores)
        await manager.process_message("u1", "I hate my job")
        await manager.process_message("u1", "Test on Monday, groceries to buy")
        await manager.sessions.set_mode("u1", AffectState.EMOTIONAL)
        session = await manager.sessions.get("u1")
        assert len(session.pending) == 3

        restored = UserSession.from_dict(json.loads(json.dumps(session.to_dict())))
        assert restored.mode == AffectState.EMOTIONAL
        assert restored.pending.current == session.pending.current
        assert restored.pending.queued == session.pending.queued
        assert restored.pending.awaiting_since == session.pending.awaiting_since
        assert restored.turns == session.turns
        assert restored.turns[0].mode == AffectState.EMOTIONAL

    asyncio.run(run())


def test_idle_sessions_are_evicted():
    async def run():
        sessions = SessionStore(ttl_seconds=60)
        await sessions.set_mode("idle", AffectState.EMOTIONAL)
        async with sessions.lock("idle"):
            pass
        async with sessions.lock("busy"):
            await sessions.set_mode("busy", AffectState.EMOTIONAL)
            later = datetime.now() + timedelta(minutes=5)
            assert sessions.evict_idle(now=later) == 1

        assert "idle" not in sessions._sessions
        assert "idle" not in sessions._locks
        assert await sessions.get_mode("busy") == AffectState.EMOTIONAL
        assert await sessions.get_mode("idle") == AffectState.NEUTRAL

    asyncio.run(run())


def test_clear_drops_cached_session():
    async def run():
        sessions = SessionStore()
        await sessions.set_mode("u1", AffectState.EMOTIONAL)
        await sessions.clear("u1")
        assert "u1" not in sessions._sessions
        assert await sessions.get_mode("u1") == AffectState.NEUTRAL

    asyncio.run(run())


def main():
    tests = [
        test_emotional_turn_proposes_nothing,
        test_emotional_turn_asking_for_help_gets_gentle_suggestions,
        test_neutral_turn_extracts_and_suggests,
        test_neutral_turn_without_candidates_omits_pending,
        test_mode_does_not_carry_over,
        test_empty_generation_falls_back,
        test_generation_timeout_is_processing_failure,
        test_invalid_message_is_rejected,
        test_update_and_delete_candidates_are_rejected,
        test_legacy_client_keys_are_accepted,
        test_candidate_round_trip,
        test_batch_execution_isolates_failures,
        test_single_execution_raises_execution_failure,
        test_reply_classification,
        test_confirming_single_candidate_persists_one_task,
        test_reject_then_confirm_drains_queue,
        test_reject_last_candidate_closes,
        test_failed_execution_still_advances,
        test_yes_without_pending_is_a_normal_turn,
        test_free_text_keeps_pending_when_no_new_candidates,
        test_new_candidates_replace_pending_queue,
        test_stale_confirmation_expires,
        test_history_and_clear,
        test_concurrent_confirmations_save_once,
        test_client_execution_settles_pending_action,
        test_executing_unrelated_action_keeps_queue,
        test_session_survives_serialization,
        test_idle_sessions_are_evicted,
        test_clear_drops_cached_session,
    ]

    failed = 0
    for test in tests:
        try:
            test()
            logger.info(f"✅ PASS: {test.__name__}")
        except AssertionError as e:
            failed += 1
            logger.error(f"❌ FAIL: {test.__name__}: {e}")

    logger.info("=" * 80)
    logger.info("✅ ALL TESTS PASSED!" if not failed else f"❌ {failed} TEST(S) FAILED")
    return failed == 0


if __name__ == "__main__":
    success = main()
    sys.exit(0 if success else 1)
