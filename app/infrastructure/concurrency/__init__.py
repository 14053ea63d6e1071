"""
Управление конкурентностью.

Этот модуль содержит механизмы сериализации операций акторов.
"""

from .session_lock import KeyedLockManager

__all__ = [
    "KeyedLockManager",
]
