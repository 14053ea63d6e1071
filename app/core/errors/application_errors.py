"""
Прикладные исключения.

Исключения уровня сценария обработки хода.
"""

from .base import ApplicationError


class TurnFailedError(ApplicationError):
    """
    Исключение: ход завершился непредвиденной ошибкой.

    Оркестратор заворачивает в него все неизвестные исключения,
    чтобы наружу не уходили внутренние детали.

    Пример:
        >>> raise TurnFailedError("session-123", reason="KeyError: 'choices'")
    """

    def __init__(self, session_id: str, reason: str):
        """
        Args:
            session_id: ID разговора
            reason: Внутренняя причина (только для логов и details)
        """
        super().__init__(
            message="Something went wrong while processing your message",
            details={"session_id": session_id, "reason": reason},
            error_code="TURN_FAILED"
        )
