"""
SessionLog actor.

Owns the ordered, size-bounded message history and the free-form user
context of every conversation. State is hydrated lazily from durable
storage on first access to a key and kept in memory afterwards.
"""
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Set

from pydantic import ValidationError

from app.core.errors import PersistenceError
from app.infrastructure.concurrency import KeyedLockManager
from app.infrastructure.persistence import StateStore
from app.models.schemas import Message, SessionLogSnapshot, SessionLogState

logger = logging.getLogger("chat-runtime.session_log")

MAX_MESSAGES = 50
MAX_CACHED_KEYS = 1000

NAMESPACE = "session_log"
MESSAGES_RECORD = "messages"
CONTEXT_RECORD = "userContext"
LAST_ACTIVITY_FIELD = "lastActivity"


class SessionLog:
    """
    Per-conversation message log.

    Features:
    - One operation at a time per conversation key, keys are independent
    - Rolling window of the last 50 messages (oldest evicted first)
    - Persist-then-commit: memory changes only after storage accepted the write
    - At most ~max_cached_keys idle conversations stay in memory; evicted ones
      are hydrated again on next access
    """

    def __init__(
        self,
        store: StateStore,
        max_messages: int = MAX_MESSAGES,
        max_cached_keys: int = MAX_CACHED_KEYS,
    ):
        self._store = store
        self._max_messages = max_messages
        self._max_cached_keys = max_cached_keys
        self._states: Dict[str, SessionLogState] = {}
        self._hydrated: Set[str] = set()
        self._locks = KeyedLockManager("session_log")
        logger.info("SessionLog created")

    async def _hydrate(self, key: str) -> SessionLogState:
        """Load state for key on first access. Must run under the key lock."""
        if key in self._hydrated:
            return self._states[key]

        stored_messages = await self._store.load(NAMESPACE, key, MESSAGES_RECORD)
        stored_context = await self._store.load(NAMESPACE, key, CONTEXT_RECORD)

        try:
            context: Dict[str, Any] = dict(stored_context or {})
            last_activity_ms = context.pop(LAST_ACTIVITY_FIELD, None)
            state = SessionLogState(
                messages=[Message.model_validate(m) for m in stored_messages or []],
                user_context=context,
                last_activity=_from_millis(last_activity_ms),
            )
        except (ValidationError, TypeError, ValueError) as e:
            logger.error(f"Stored session log {key} is unreadable: {e}")
            raise PersistenceError(operation="load", record=MESSAGES_RECORD, reason=str(e)) from e

        self._states[key] = state
        self._hydrated.add(key)
        logger.debug(f"Hydrated session log {key}: {len(state.messages)} messages")
        return state

    def _release_idle(self) -> None:
        """Drop cached state of conversations whose locks were cleaned up."""
        for key in self._locks.cleanup_unused_locks(self._max_cached_keys):
            self._states.pop(key, None)
            self._hydrated.discard(key)

    def _evict(self, messages: List[Message]) -> List[Message]:
        if len(messages) > self._max_messages:
            return messages[-self._max_messages:]
        return messages

    async def _commit_messages(self, key: str, state: SessionLogState, messages: List[Message]) -> None:
        await self._store.save(
            NAMESPACE,
            key,
            MESSAGES_RECORD,
            [m.model_dump(mode="json") for m in messages],
        )
        state.messages = messages

    async def get_all(self, key: str) -> SessionLogSnapshot:
        """
        Return messages and user context for a conversation.

        Unknown keys yield an empty snapshot.
        """
        self._release_idle()
        async with self._locks.lock(key):
            state = await self._hydrate(key)
            return SessionLogSnapshot(
                messages=list(state.messages),
                user_context=dict(state.user_context),
                last_activity=state.last_activity,
            )

    async def append(self, key: str, role: str, content: str) -> None:
        """
        Append one message and persist the resulting window.

        Raises:
            PersistenceError: storage rejected the write; memory is unchanged
        """
        self._release_idle()
        async with self._locks.lock(key):
            state = await self._hydrate(key)
            messages = self._evict(state.messages + [Message(role=role, content=content)])
            await self._commit_messages(key, state, messages)
            logger.debug(f"Appended {role} message to {key}, window size {len(messages)}")

    async def append_exchange(self, key: str, user_content: str, assistant_content: str) -> None:
        """
        Append a user turn and the assistant reply as one step.

        The pair stays adjacent and in user -> assistant order even when
        several turns for the same conversation overlap.
        """
        self._release_idle()
        async with self._locks.lock(key):
            state = await self._hydrate(key)
            now = datetime.now(timezone.utc)
            messages = self._evict(
                state.messages
                + [
                    Message(role="user", content=user_content, timestamp=now),
                    Message(role="assistant", content=assistant_content, timestamp=now),
                ]
            )
            await self._commit_messages(key, state, messages)
            logger.info(f"Committed exchange to {key}, window size {len(messages)}")

    async def merge_context(self, key: str, partial: Dict[str, Any]) -> Dict[str, Any]:
        """
        Shallow-merge partial into the user context (last write wins per field).

        Returns:
            The merged context
        """
        self._release_idle()
        async with self._locks.lock(key):
            state = await self._hydrate(key)
            merged = {**state.user_context, **partial}
            merged.pop(LAST_ACTIVITY_FIELD, None)
            now = datetime.now(timezone.utc)

            await self._store.save(
                NAMESPACE,
                key,
                CONTEXT_RECORD,
                {**merged, LAST_ACTIVITY_FIELD: _to_millis(now)},
            )
            state.user_context = merged
            state.last_activity = now
            logger.debug(f"Merged context fields {sorted(partial)} into {key}")
            return dict(merged)

    async def clear(self, key: str) -> None:
        """Drop the message history of a conversation; user context is kept."""
        self._release_idle()
        async with self._locks.lock(key):
            state = await self._hydrate(key)
            await self._store.delete(NAMESPACE, key, MESSAGES_RECORD)
            state.messages = []
            logger.info(f"Cleared session log {key}")


def _to_millis(moment: datetime) -> int:
    return int(moment.timestamp() * 1000)


def _from_millis(value: Optional[int]) -> Optional[datetime]:
    if value is None:
        return None
    return datetime.fromtimestamp(value / 1000, tz=timezone.utc)
