"""
Per-user conversation state.

Manages:
- Conversation history (recent N turns, LLM context)
- Affect mode (emotional / neutral), overwritten every turn
- Pending confirmation queue (one current action, the rest held)

Sessions are cached in-process and mirrored to Redis when connected.
"""

import asyncio
import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timedelta
from typing import Dict, List, Optional

import redis.asyncio as redis

from lifesync.conversation.actions import CandidateAction, dump_candidate, parse_candidate
from lifesync.conversation.emotion import AffectState

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ConversationTurn:
    """One user message and the assistant's reply to it."""
    user_id: str
    input_text: str
    timestamp: datetime = field(default_factory=datetime.now)
    mode: AffectState = AffectState.NEUTRAL
    reply: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "userId": self.user_id,
            "inputText": self.input_text,
            "timestamp": self.timestamp.isoformat(),
            "mode": self.mode.value,
            "reply": self.reply,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "ConversationTurn":
        return cls(
            user_id=data["userId"],
            input_text=data["inputText"],
            timestamp=datetime.fromisoformat(data["timestamp"]),
            mode=AffectState(data.get("mode", AffectState.NEUTRAL.value)),
            reply=data.get("reply"),
        )


@dataclass
class PendingQueue:
    """
    FIFO of candidate actions awaiting confirmation.

    At most one action is `current` (shown to the user); the rest are
    `queued` and only surface by becoming current.
    """
    current: Optional[CandidateAction] = None
    queued: List[CandidateAction] = field(default_factory=list)
    awaiting_since: Optional[datetime] = None

    @property
    def is_awaiting(self) -> bool:
        return self.current is not None

    def __len__(self) -> int:
        return len(self.queued) + (1 if self.current is not None else 0)

    def load(self, candidates: List[CandidateAction]):
        """Replace the queue with a fresh batch."""
        if not candidates:
            self.clear()
            return
        self.current = candidates[0]
        self.queued = list(candidates[1:])
        self.awaiting_since = datetime.now()

    def advance(self) -> Optional[CandidateAction]:
        """Drop the current action and promote the next one, if any."""
        if self.queued:
            self.current = self.queued.pop(0)
            self.awaiting_since = datetime.now()
        else:
            self.clear()
        return self.current

    def discard(self, action: CandidateAction) -> bool:
        """Remove an action that was settled elsewhere; True if it was pending."""
        if self.current is not None and self.current == action:
            self.advance()
            return True
        if action in self.queued:
            self.queued.remove(action)
            return True
        return False

    def clear(self):
        self.current = None
        self.queued = []
        self.awaiting_since = None

    def is_expired(self, ttl_seconds: int, now: Optional[datetime] = None) -> bool:
        if not self.is_awaiting or self.awaiting_since is None:
            return False
        now = now or datetime.now()
        return now - self.awaiting_since > timedelta(seconds=ttl_seconds)

    def to_dict(self) -> dict:
        return {
            "current": dump_candidate(self.current) if self.current else None,
            "queued": [dump_candidate(a) for a in self.queued],
            "awaiting_since": self.awaiting_since.isoformat() if self.awaiting_since else None,
        }

    @classmethod
    def from_dict(cls, data: dict) -> "PendingQueue":
        since = data.get("awaiting_since")
        return cls(
            current=parse_candidate(data["current"]) if data.get("current") else None,
            queued=[parse_candidate(a) for a in data.get("queued", [])],
            awaiting_since=datetime.fromisoformat(since) if since else None,
        )


@dataclass
class UserSession:
    """Working memory for one user."""
    user_id: str
    mode: AffectState = AffectState.NEUTRAL
    turns: List[ConversationTurn] = field(default_factory=list)
    pending: PendingQueue = field(default_factory=PendingQueue)
    updated_at: datetime = field(default_factory=datetime.now)

    # Config
    max_turns: int = 50  # Keep last N turns

    def add_turn(self, turn: ConversationTurn):
        self.turns.append(turn)
        self.updated_at = datetime.now()

        # Trim old turns
        if len(self.turns) > self.max_turns:
            self.turns = self.turns[-self.max_turns:]

    def get_history_text(self, n: int = 10) -> str:
        """Recent turns formatted as LLM context."""
        lines = []
        for turn in self.turns[-n:]:
            lines.append(f"User: {turn.input_text}")
            if turn.reply:
                lines.append(f"LifeSync: {turn.reply}")
        return "\n".join(lines)

    def to_dict(self) -> dict:
        return {
            "user_id": self.user_id,
            "mode": self.mode.value,
            "turns": [t.to_dict() for t in self.turns],
            "pending": self.pending.to_dict(),
            "updated_at": self.updated_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, data: dict, max_turns: int = 50) -> "UserSession":
        return cls(
            user_id=data["user_id"],
            mode=AffectState(data.get("mode", AffectState.NEUTRAL.value)),
            turns=[ConversationTurn.from_dict(t) for t in data.get("turns", [])],
            pending=PendingQueue.from_dict(data.get("pending") or {}),
            updated_at=datetime.fromisoformat(data["updated_at"]),
            max_turns=max_turns,
        )


class SessionStore:
    """
    Session records keyed by user_id.

    The in-process cache is authoritative; Redis (if connected) keeps
    sessions across restarts with a TTL. Callers serialize work on one
    user through `lock(user_id)`.
    """

    def __init__(self, ttl_seconds: int = 7200, max_turns: int = 50):
        self.ttl_seconds = ttl_seconds
        self.max_turns = max_turns
        self.redis: Optional[redis.Redis] = None
        self._sessions: Dict[str, UserSession] = {}
        self._locks: Dict[str, asyncio.Lock] = {}

    async def connect(self, redis_url: str = "redis://localhost:6379/0"):
        """Connect to Redis."""
        self.redis = redis.from_url(redis_url, decode_responses=True)
        await self.redis.ping()
        logger.info("SessionStore connected to Redis")

    async def close(self):
        """Close Redis connection."""
        if self.redis:
            await self.redis.close()
            self.redis = None

    def _key(self, user_id: str) -> str:
        return f"lifesync:session:{user_id}"

    def lock(self, user_id: str) -> asyncio.Lock:
        """Per-user lock; one turn at a time for the same user."""
        if user_id not in self._locks:
            self._locks[user_id] = asyncio.Lock()
        return self._locks[user_id]

    def evict_idle(self, now: Optional[datetime] = None) -> int:
        """
        Drop cached sessions untouched for longer than the TTL.

        Sessions whose lock is held are kept. Locks left without a cached
        session are dropped once free. Returns the number of evicted sessions.
        """
        now = now or datetime.now()
        ttl = timedelta(seconds=self.ttl_seconds)
        idle = [
            user_id for user_id, session in self._sessions.items()
            if now - session.updated_at > ttl and not self._is_locked(user_id)
        ]
        for user_id in idle:
            del self._sessions[user_id]

        for user_id in [u for u in self._locks if u not in self._sessions]:
            if not self._is_locked(user_id):
                del self._locks[user_id]

        if idle:
            logger.info(f"Evicted {len(idle)} idle session(s)")
        return len(idle)

    def _is_locked(self, user_id: str) -> bool:
        lock = self._locks.get(user_id)
        return lock is not None and lock.locked()

    async def get(self, user_id: str) -> UserSession:
        """Get the session for a user, creating an empty one if needed."""
        self.evict_idle()
        if user_id in self._sessions:
            return self._sessions[user_id]

        session = await self._load(user_id)
        if session is None:
            session = UserSession(user_id=user_id, max_turns=self.max_turns)
        self._sessions[user_id] = session
        return session

    async def _load(self, user_id: str) -> Optional[UserSession]:
        if not self.redis:
            return None

        data = await self.redis.get(self._key(user_id))
        if not data:
            return None
        return UserSession.from_dict(json.loads(data), max_turns=self.max_turns)

    async def save(self, session: UserSession):
        """Persist a session."""
        session.updated_at = datetime.now()
        self._sessions[session.user_id] = session

        if not self.redis:
            return

        data = json.dumps(session.to_dict())
        await self.redis.setex(self._key(session.user_id), self.ttl_seconds, data)
        logger.debug(f"Saved session for {session.user_id}")

    # --- Conversation mode ---

    async def set_mode(self, user_id: str, mode: AffectState):
        session = await self.get(user_id)
        session.mode = mode
        await self.save(session)

    async def get_mode(self, user_id: str) -> AffectState:
        session = await self.get(user_id)
        return session.mode

    # --- History ---

    async def append_turn(self, turn: ConversationTurn):
        session = await self.get(turn.user_id)
        session.add_turn(turn)
        await self.save(session)

    async def get_history(self, user_id: str) -> List[ConversationTurn]:
        session = await self.get(user_id)
        return list(session.turns)

    async def clear(self, user_id: str):
        """Forget history, reset mode to neutral and drop pending actions."""
        self._sessions.pop(user_id, None)
        if self.redis:
            await self.redis.delete(self._key(user_id))
        logger.info(f"Cleared session for {user_id}")
