"""
API схемы.

Тела запросов и ответов HTTP-слоя. Поля в camelCase повторяют формат,
который ожидает веб-клиент.
"""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.models.schemas import ConversationSummary


class HealthResponse(BaseModel):
    status: str = Field(description="Статус сервиса")
    service: str = Field(description="Название сервиса")
    version: str = Field(description="Версия сервиса")


class ErrorResponse(BaseModel):
    error: str
    error_code: str


class CreateSessionRequest(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None


class UpdateSessionRequest(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: Optional[str] = None
    last_message_preview: Optional[str] = Field(default=None, alias="lastMessage")


class DeleteSessionRequest(BaseModel):
    id: str


class SessionResponse(BaseModel):
    session: ConversationSummary


class SessionListResponse(BaseModel):
    sessions: List[ConversationSummary]


class HistoryMessage(BaseModel):
    role: str
    content: str
    timestamp: int = Field(description="Unix time in milliseconds")


class HistoryResponse(BaseModel):
    messages: List[HistoryMessage]
    context: Dict[str, Any]


class ContextResponse(BaseModel):
    success: bool = True
    context: Dict[str, Any]


class SuccessResponse(BaseModel):
    success: bool = True


class DigestResponse(BaseModel):
    digest: str
