"""
Доменные исключения.

Исключения для ошибок бизнес-логики и нарушения правил диалога.
"""

from typing import Optional, Dict, Any
from .base import DomainError


class TurnValidationError(DomainError):
    """
    Исключение: ход не содержит ни текста, ни вложений.

    Выбрасывается оркестратором до начала любой работы.

    Пример:
        >>> raise TurnValidationError("session-123")
    """

    def __init__(self, session_id: str, details: Optional[Dict[str, Any]] = None):
        """
        Args:
            session_id: ID разговора, для которого пришел пустой ход
            details: Дополнительные детали
        """
        super().__init__(
            message="Message, image, or file is required",
            details={"session_id": session_id, **(details or {})},
            error_code="VALIDATION_ERROR"
        )


class ConversationNotFoundError(DomainError):
    """
    Исключение: разговор не найден в каталоге.

    Выбрасывается при обновлении записи каталога с неизвестным ID.
    Повторять операцию бессмысленно.

    Пример:
        >>> raise ConversationNotFoundError("session-123")
    """

    def __init__(self, conversation_id: str, details: Optional[Dict[str, Any]] = None):
        """
        Args:
            conversation_id: ID несуществующего разговора
            details: Дополнительные детали
        """
        super().__init__(
            message="Session not found",
            details={"conversation_id": conversation_id, **(details or {})},
            error_code="NOT_FOUND"
        )
