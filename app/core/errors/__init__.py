"""
Кастомные исключения для Chat Runtime.

Этот модуль содержит иерархию исключений для различных
ошибочных ситуаций в системе.
"""

from .base import (
    ChatRuntimeError,
    DomainError,
    InfrastructureError,
    ApplicationError
)

from .domain_errors import (
    TurnValidationError,
    ConversationNotFoundError
)

from .infrastructure_errors import (
    PersistenceError,
    GenerationError,
    EnrichmentFailure
)

from .application_errors import TurnFailedError

__all__ = [
    # Базовые исключения
    "ChatRuntimeError",
    "DomainError",
    "InfrastructureError",
    "ApplicationError",

    # Доменные исключения
    "TurnValidationError",
    "ConversationNotFoundError",

    # Инфраструктурные исключения
    "PersistenceError",
    "GenerationError",
    "EnrichmentFailure",

    # Прикладные исключения
    "TurnFailedError",
]
