"""
Корень иерархии ошибок Chat Runtime.

Ошибки делятся по слоям: домен (правила диалога), инфраструктура
(хранилище, модели, внешние API) и прикладной слой (сценарий хода).
"""

from typing import Any, Dict, Optional


class ChatRuntimeError(Exception):
    """
    Общий предок всех ошибок сервиса.

    message показывается клиенту как есть, поэтому не содержит
    внутренних подробностей; они кладутся в details и попадают только
    в логи. error_code стабилен и используется клиентом для ветвления.

    Атрибуты:
        message: Текст для пользователя
        details: Диагностика (ID разговора, причина, операция)
        error_code: Машиночитаемый код
        retryable: Можно ли повторить операцию без изменений

    Пример:
        >>> err = ChatRuntimeError("Storage is busy", details={"record": "messages"})
        >>> err.public_dict()
        {'error': 'Storage is busy', 'error_code': 'ChatRuntimeError'}
    """

    retryable: bool = False

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error_code: Optional[str] = None
    ):
        """
        Args:
            message: Текст для пользователя
            details: Диагностика для логов (опционально)
            error_code: Код ошибки (по умолчанию имя класса)
        """
        self.message = message
        self.details = details or {}
        self.error_code = error_code or type(self).__name__
        super().__init__(message)

    def public_dict(self) -> Dict[str, str]:
        """Тело ответа для клиента: без details."""
        return {"error": self.message, "error_code": self.error_code}

    def to_dict(self) -> Dict[str, Any]:
        """Полное представление для логов и отладки."""
        return {
            "error_code": self.error_code,
            "message": self.message,
            "retryable": self.retryable,
            "details": self.details,
        }

    def __str__(self) -> str:
        if not self.details:
            return self.message
        return f"{self.message} (details: {self.details})"


class DomainError(ChatRuntimeError):
    """Нарушено правило диалога: пустой ход, неизвестный разговор."""


class InfrastructureError(ChatRuntimeError):
    """
    Сбой внешней зависимости.

    Хранилище состояния, модель генерации, модель зрения,
    справочные HTTP API.
    """


class ApplicationError(ChatRuntimeError):
    """Ошибка сценария хода, не попавшая в известные категории."""
