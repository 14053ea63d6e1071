"""
Блокировки на уровне ключа актора.

Обеспечивают дисциплину «один запрос за раз на ключ» для
SessionLog и SessionDirectory.
"""

import asyncio
import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict, List

logger = logging.getLogger("chat-runtime.infrastructure.session_lock")


class KeyedLockManager:
    """
    Менеджер блокировок по ключу.

    Операции с одним ключом выполняются строго по очереди в порядке
    поступления (asyncio.Lock справедлив по FIFO), операции с разными
    ключами не блокируют друг друга.

    Атрибуты:
        name: Имя владельца (для логов)
        _locks: Блокировки по ключу, от давно использованных к недавним
        _users: Число операций, держащих или ожидающих блокировку ключа
        _registry_lock: Блокировка для управления словарем

    Пример:
        >>> locks = KeyedLockManager("session_log")
        >>> async with locks.lock("session-1"):
        ...     await persist(...)
    """

    def __init__(self, name: str):
        self.name = name
        self._locks: Dict[str, asyncio.Lock] = {}
        self._users: Dict[str, int] = {}
        self._registry_lock = asyncio.Lock()

    async def _get_lock(self, key: str) -> asyncio.Lock:
        async with self._registry_lock:
            lock = self._locks.pop(key, None)
            if lock is None:
                lock = asyncio.Lock()
                logger.debug(f"[{self.name}] Created new lock for key {key}")
            # Переставляем в конец: порядок словаря = порядок использования
            self._locks[key] = lock
            return lock

    @asynccontextmanager
    async def lock(self, key: str) -> AsyncIterator[None]:
        """
        Захватить блокировку ключа на время контекста.

        Args:
            key: Ключ актора (ID разговора или имя каталога)
        """
        self._users[key] = self._users.get(key, 0) + 1
        try:
            lock = await self._get_lock(key)
            async with lock:
                logger.debug(f"[{self.name}] Lock acquired for key {key}")
                try:
                    yield
                finally:
                    logger.debug(f"[{self.name}] Lock released for key {key}")
        finally:
            self._users[key] -= 1
            if not self._users[key]:
                del self._users[key]

    def cleanup_unused_locks(self, max_locks: int = 1000) -> List[str]:
        """
        Удалить давно использованные свободные блокировки.

        Ключи, у которых есть активная или ожидающая операция, не
        трогаются, поэтому число блокировок может временно превышать
        max_locks.

        Args:
            max_locks: Сколько блокировок можно оставить

        Returns:
            Ключи удаленных блокировок; владелец может сбросить
            связанное с ними состояние

        Пример:
            >>> evicted = lock_manager.cleanup_unused_locks(max_locks=500)
        """
        to_remove = len(self._locks) - max_locks
        if to_remove <= 0:
            return []

        evicted = []
        for key in list(self._locks):
            if len(evicted) == to_remove:
                break
            if key in self._users:
                continue
            del self._locks[key]
            evicted.append(key)

        if evicted:
            logger.info(f"[{self.name}] Cleaned up {len(evicted)} unused locks")
        return evicted

    def is_locked(self, key: str) -> bool:
        """Проверить, выполняется ли сейчас операция над ключом."""
        lock = self._locks.get(key)
        return lock.locked() if lock else False

    def get_lock_count(self) -> int:
        return len(self._locks)
