"""
Инфраструктурные исключения.

Исключения для ошибок работы с хранилищем и внешними сервисами.
"""

from typing import Optional, Dict, Any
from .base import InfrastructureError


class PersistenceError(InfrastructureError):
    """
    Исключение: ошибка долговременного хранилища.

    Выбрасывается акторами (SessionLog, SessionDirectory), когда
    чтение или запись состояния не удались. Состояние в памяти
    при этом не меняется, поэтому операцию можно повторить.

    Пример:
        >>> raise PersistenceError(
        ...     operation="save",
        ...     record="messages",
        ...     reason="database is locked"
        ... )
    """

    retryable = True

    def __init__(
        self,
        operation: str,
        record: str,
        reason: str,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Args:
            operation: Операция (load, save, delete)
            record: Логическая запись (messages, userContext, summaries)
            reason: Причина ошибки
            details: Дополнительные детали
        """
        super().__init__(
            message="Storage is temporarily unavailable, please try again",
            details={
                "operation": operation,
                "record": record,
                "reason": reason,
                **(details or {})
            },
            error_code="PERSISTENCE_ERROR"
        )


class GenerationError(InfrastructureError):
    """
    Исключение: модель генерации не вернула пригодный ответ.

    Пример:
        >>> raise GenerationError(
        ...     reason="Malformed chat completion response",
        ...     status_code=200
        ... )
    """

    def __init__(
        self,
        reason: str,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Args:
            reason: Причина ошибки
            status_code: HTTP статус код (если применимо)
            details: Дополнительные детали
        """
        super().__init__(
            message="Invalid response from AI",
            details={
                "reason": reason,
                "status_code": status_code,
                **(details or {})
            },
            error_code="GENERATION_ERROR"
        )


class EnrichmentFailure(InfrastructureError):
    """
    Ошибка отдельной задачи обогащения контекста.

    Никогда не выбрасывается за пределы EnrichmentCoordinator:
    существует только как значение внутри EnrichmentResult.
    """

    def __init__(
        self,
        kind: str,
        reason: str,
        details: Optional[Dict[str, Any]] = None
    ):
        """
        Args:
            kind: Тип задачи (image, file, external)
            reason: Причина ошибки
            details: Дополнительные детали
        """
        super().__init__(
            message=f"Enrichment task '{kind}' failed: {reason}",
            details={"kind": kind, "reason": reason, **(details or {})},
            error_code="ENRICHMENT_FAILURE"
        )
