"""
SessionDirectory actor.

Single global registry of conversation summaries used to render the
conversation list. Ordered by creation (front = newest); updates never
reorder the list.
"""
import logging
from datetime import datetime, timezone
from typing import List, Optional
from uuid import uuid4

from pydantic import ValidationError

from app.core.errors import ConversationNotFoundError, PersistenceError
from app.infrastructure.concurrency import KeyedLockManager
from app.infrastructure.persistence import StateStore
from app.models.schemas import ConversationSummary

logger = logging.getLogger("chat-runtime.session_directory")

NAMESPACE = "session_directory"
DIRECTORY_KEY = "user-default"
SUMMARIES_RECORD = "summaries"
DEFAULT_NAME = "New Chat"


def generate_conversation_id() -> str:
    return f"session-{uuid4().hex[:9]}"


class SessionDirectory:
    """
    Реестр разговоров.

    Все операции проходят через одну блокировку, поэтому обновления
    метаданных всех разговоров сериализуются. Список небольшой,
    каждая операция O(n) по памяти плюс одна запись в хранилище.
    """

    def __init__(self, store: StateStore, directory_key: str = DIRECTORY_KEY):
        self._store = store
        self._key = directory_key
        self._summaries: List[ConversationSummary] = []
        self._hydrated = False
        self._locks = KeyedLockManager("session_directory")

    async def _hydrate(self) -> List[ConversationSummary]:
        if not self._hydrated:
            stored = await self._store.load(NAMESPACE, self._key, SUMMARIES_RECORD)
            try:
                self._summaries = [ConversationSummary.model_validate(s) for s in stored or []]
            except (ValidationError, TypeError) as e:
                logger.error(f"Stored directory {self._key} is unreadable: {e}")
                raise PersistenceError(operation="load", record=SUMMARIES_RECORD, reason=str(e)) from e
            self._hydrated = True
            logger.debug(f"Hydrated directory {self._key}: {len(self._summaries)} conversations")
        return self._summaries

    async def _commit(self, summaries: List[ConversationSummary]) -> None:
        await self._store.save(
            NAMESPACE,
            self._key,
            SUMMARIES_RECORD,
            [s.model_dump(mode="json") for s in summaries],
        )
        self._summaries = summaries

    async def list(self) -> List[ConversationSummary]:
        """Вернуть записи в порядке создания (первая самая новая)."""
        async with self._locks.lock(self._key):
            summaries = await self._hydrate()
            return [s.model_copy() for s in summaries]

    async def get(self, conversation_id: str) -> Optional[ConversationSummary]:
        async with self._locks.lock(self._key):
            summaries = await self._hydrate()
            for summary in summaries:
                if summary.id == conversation_id:
                    return summary.model_copy()
            return None

    async def create(
        self,
        conversation_id: Optional[str] = None,
        name: Optional[str] = None,
    ) -> ConversationSummary:
        """
        Создать запись и поставить её в начало списка.

        Уникальность переданного conversation_id гарантирует вызывающий:
        повторный ID создаст вторую запись.

        Args:
            conversation_id: ID разговора (по умолчанию генерируется)
            name: Отображаемое имя (по умолчанию "New Chat")

        Returns:
            Созданная запись
        """
        async with self._locks.lock(self._key):
            summaries = await self._hydrate()
            now = datetime.now(timezone.utc)
            summary = ConversationSummary(
                id=conversation_id or generate_conversation_id(),
                name=name or DEFAULT_NAME,
                last_message_preview="",
                created_at=now,
                updated_at=now,
            )
            await self._commit([summary] + summaries)
            logger.info(f"Created conversation {summary.id}")
            return summary.model_copy()

    async def update(
        self,
        conversation_id: str,
        name: Optional[str] = None,
        last_message_preview: Optional[str] = None,
    ) -> ConversationSummary:
        """
        Обновить имя и/или превью последнего сообщения на месте.

        Позиция записи в списке не меняется, updated_at обновляется.

        Raises:
            ConversationNotFoundError: записи с таким ID нет
        """
        async with self._locks.lock(self._key):
            summaries = await self._hydrate()
            index = next((i for i, s in enumerate(summaries) if s.id == conversation_id), None)
            if index is None:
                raise ConversationNotFoundError(conversation_id)

            changes = {"updated_at": datetime.now(timezone.utc)}
            if name:
                changes["name"] = name
            if last_message_preview is not None:
                changes["last_message_preview"] = last_message_preview

            updated = summaries[index].model_copy(update=changes)
            await self._commit(summaries[:index] + [updated] + summaries[index + 1:])
            logger.debug(f"Updated conversation {conversation_id}: {sorted(changes)}")
            return updated.model_copy()

    async def remove(self, conversation_id: str) -> None:
        """Удалить запись; отсутствие записи ошибкой не считается."""
        async with self._locks.lock(self._key):
            summaries = await self._hydrate()
            await self._commit([s for s in summaries if s.id != conversation_id])
            logger.info(f"Removed conversation {conversation_id}")
