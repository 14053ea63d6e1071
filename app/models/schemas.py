from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field

from app.core.errors import EnrichmentFailure


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


class Message(BaseModel):
    """Сообщение в истории разговора. Неизменяемо после сохранения."""

    model_config = ConfigDict(frozen=True)

    role: Literal["user", "assistant"]
    content: str
    timestamp: datetime = Field(default_factory=utc_now)


class SessionLogState(BaseModel):
    """Состояние журнала одного разговора (владелец: SessionLog)."""

    messages: List[Message] = Field(default_factory=list)
    user_context: Dict[str, Any] = Field(default_factory=dict)
    last_activity: Optional[datetime] = None


class SessionLogSnapshot(BaseModel):
    """Копия состояния журнала, которую получают вызывающие."""

    messages: List[Message]
    user_context: Dict[str, Any]
    last_activity: Optional[datetime] = None


class ConversationSummary(BaseModel):
    """Запись каталога разговоров (владелец: SessionDirectory)."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    name: str = "New Chat"
    last_message_preview: str = Field(default="", alias="lastMessage")
    created_at: datetime = Field(default_factory=utc_now, alias="createdAt")
    updated_at: datetime = Field(default_factory=utc_now, alias="updatedAt")


class ChatMessage(BaseModel):
    """Один элемент запроса к модели генерации."""

    role: Literal["system", "user", "assistant"]
    content: str


class EnrichmentBundle(BaseModel):
    """Контекст, собранный за один ход. Не сохраняется."""

    image_context: Optional[str] = None
    file_context: Optional[str] = None
    external_context: Optional[str] = None

    @property
    def is_empty(self) -> bool:
        return not (self.image_context or self.file_context or self.external_context)


@dataclass
class EnrichmentResult:
    """Результат одной задачи обогащения: текст или ошибка, но не исключение."""

    kind: Literal["image", "file", "external"]
    text: Optional[str] = None
    failure: Optional[EnrichmentFailure] = None

    @property
    def ok(self) -> bool:
        return self.failure is None and bool(self.text)


class TurnInput(BaseModel):
    """Входные данные одного хода (тело POST /api/chat)."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={
            "example": {
                "message": "What's the weather in Paris?",
                "sessionId": "session-1a2b3c4d5",
            }
        },
    )

    message: str = ""
    session_id: str = Field(alias="sessionId")
    image: Optional[str] = Field(default=None, description="Image as data URL")
    file_name: Optional[str] = Field(default=None, alias="fileName")
    file: Optional[str] = Field(default=None, alias="fileData", description="File as data URL")


class TurnResult(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    response: str
    session_id: str = Field(alias="sessionId")
