"""
Conversation module: intent-to-action mediation.

- EmotionClassifier gates extraction (emotional turns propose nothing)
- ActionExtractor turns text into candidate actions
- SuggestionGenerator adds advisory prompts
- DialogueSequencer asks about one candidate at a time
- ActionExecutor persists confirmed candidates
- ConversationOrchestrator / DialogueManager tie one turn together
"""

from lifesync.conversation.actions import (
    ActionOperation,
    ActionType,
    CandidateAction,
    CalendarAction,
    GoalAction,
    MoodAction,
    TaskAction,
    parse_candidate,
    dump_candidate,
)
from lifesync.conversation.context import (
    ConversationTurn,
    PendingQueue,
    SessionStore,
    UserSession,
)
from lifesync.conversation.emotion import AffectState, EmotionClassifier
from lifesync.conversation.extractor import ActionExtractor
from lifesync.conversation.suggestions import SuggestionGenerator
from lifesync.conversation.executor import ActionExecutor, ExecutionResult
from lifesync.conversation.sequencer import DialogueSequencer, ReplyIntent, SequencerState
from lifesync.conversation.orchestrator import AIResponse, ConversationOrchestrator
from lifesync.conversation.dialogue import DialogueManager, DialogueResponse

__all__ = [
    "ActionOperation",
    "ActionType",
    "CandidateAction",
    "CalendarAction",
    "GoalAction",
    "MoodAction",
    "TaskAction",
    "parse_candidate",
    "dump_candidate",
    "ConversationTurn",
    "PendingQueue",
    "SessionStore",
    "UserSession",
    "AffectState",
    "EmotionClassifier",
    "ActionExtractor",
    "SuggestionGenerator",
    "ActionExecutor",
    "ExecutionResult",
    "DialogueSequencer",
    "ReplyIntent",
    "SequencerState",
    "AIResponse",
    "ConversationOrchestrator",
    "DialogueManager",
    "DialogueResponse",
]
