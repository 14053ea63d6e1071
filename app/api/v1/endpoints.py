"""
HTTP роутер чата.

Тонкий слой: переводит запросы в вызовы ядра, а ChatRuntimeError
в коды ответа. Логики диалога здесь нет.
"""

import logging
from typing import Any, Dict

from fastapi import APIRouter, Body, Depends, Query
from fastapi.responses import JSONResponse

from app.core.config import AppConfig
from app.core.dependencies import (
    get_conversation_digest,
    get_orchestrator,
    get_session_directory,
    get_session_log,
)
from app.core.errors import (
    ChatRuntimeError,
    ConversationNotFoundError,
    GenerationError,
    PersistenceError,
    TurnValidationError,
)
from app.models.schemas import TurnInput, TurnResult
from app.services.conversation_digest import ConversationDigest
from app.services.orchestrator import ChatOrchestrator
from app.services.session_directory import SessionDirectory
from app.services.session_log import SessionLog

from .schemas import (
    ContextResponse,
    CreateSessionRequest,
    DeleteSessionRequest,
    DigestResponse,
    HealthResponse,
    HistoryMessage,
    HistoryResponse,
    SessionListResponse,
    SessionResponse,
    SuccessResponse,
    UpdateSessionRequest,
)

logger = logging.getLogger("chat-runtime.api")

router = APIRouter()

DEFAULT_SESSION_ID = "default"

STATUS_BY_ERROR = {
    TurnValidationError: 400,
    ConversationNotFoundError: 404,
    GenerationError: 502,
    PersistenceError: 503,
}


def error_response(error: ChatRuntimeError) -> JSONResponse:
    status_code = next(
        (status for error_type, status in STATUS_BY_ERROR.items() if isinstance(error, error_type)),
        500,
    )
    return JSONResponse(status_code=status_code, content=error.public_dict())


@router.get("/health", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    logger.debug("Health check called")
    return HealthResponse(status="healthy", service="chat-runtime", version=AppConfig.VERSION)


@router.post("/api/chat", response_model=TurnResult)
async def chat(
    turn: TurnInput,
    orchestrator: ChatOrchestrator = Depends(get_orchestrator),
):
    """
    Обработать сообщение пользователя.

    Пример запроса:
        POST /api/chat
        {"message": "What's the weather in Paris?", "sessionId": "session-1a2b3c4d5"}

    Пример ответа:
        {"response": "...", "sessionId": "session-1a2b3c4d5"}
    """
    try:
        return await orchestrator.run_turn(turn)
    except ChatRuntimeError as e:
        return error_response(e)


# ==================== Sessions ====================

@router.get("/api/sessions", response_model=SessionListResponse)
async def list_sessions(directory: SessionDirectory = Depends(get_session_directory)):
    try:
        return SessionListResponse(sessions=await directory.list())
    except ChatRuntimeError as e:
        return error_response(e)


@router.post("/api/sessions", response_model=SessionResponse)
async def create_session(
    request: CreateSessionRequest = Body(default=CreateSessionRequest()),
    directory: SessionDirectory = Depends(get_session_directory),
):
    try:
        summary = await directory.create(request.id, request.name)
    except ChatRuntimeError as e:
        return error_response(e)
    return SessionResponse(session=summary)


@router.put("/api/sessions", response_model=SessionResponse)
async def update_session(
    request: UpdateSessionRequest,
    directory: SessionDirectory = Depends(get_session_directory),
):
    try:
        summary = await directory.update(
            request.id,
            name=request.name,
            last_message_preview=request.last_message_preview,
        )
    except ChatRuntimeError as e:
        return error_response(e)
    return SessionResponse(session=summary)


@router.delete("/api/sessions", response_model=SuccessResponse)
async def delete_session(
    request: DeleteSessionRequest,
    directory: SessionDirectory = Depends(get_session_directory),
):
    try:
        await directory.remove(request.id)
    except ChatRuntimeError as e:
        return error_response(e)
    return SuccessResponse()


# ==================== History & context ====================

@router.get("/api/history", response_model=HistoryResponse)
async def get_history(
    session_id: str = Query(default=DEFAULT_SESSION_ID, alias="sessionId"),
    session_log: SessionLog = Depends(get_session_log),
):
    try:
        snapshot = await session_log.get_all(session_id)
    except ChatRuntimeError as e:
        return error_response(e)
    return HistoryResponse(
        messages=[
            HistoryMessage(
                role=m.role,
                content=m.content,
                timestamp=int(m.timestamp.timestamp() * 1000),
            )
            for m in snapshot.messages
        ],
        context=snapshot.user_context,
    )


@router.delete("/api/history", response_model=SuccessResponse)
async def clear_history(
    session_id: str = Query(default=DEFAULT_SESSION_ID, alias="sessionId"),
    session_log: SessionLog = Depends(get_session_log),
):
    try:
        await session_log.clear(session_id)
    except ChatRuntimeError as e:
        return error_response(e)
    return SuccessResponse()


@router.get("/api/history/digest", response_model=DigestResponse)
async def history_digest(digest: ConversationDigest = Depends(get_conversation_digest)):
    try:
        return DigestResponse(digest=await digest.build())
    except ChatRuntimeError as e:
        return error_response(e)


@router.get("/api/context")
async def get_context(
    session_id: str = Query(default=DEFAULT_SESSION_ID, alias="sessionId"),
    session_log: SessionLog = Depends(get_session_log),
):
    try:
        snapshot = await session_log.get_all(session_id)
    except ChatRuntimeError as e:
        return error_response(e)
    context = dict(snapshot.user_context)
    if snapshot.last_activity is not None:
        context["lastActivity"] = int(snapshot.last_activity.timestamp() * 1000)
    return context


@router.post("/api/context", response_model=ContextResponse)
async def merge_context(
    partial: Dict[str, Any] = Body(...),
    session_id: str = Query(default=DEFAULT_SESSION_ID, alias="sessionId"),
    session_log: SessionLog = Depends(get_session_log),
):
    try:
        merged = await session_log.merge_context(session_id, partial)
    except ChatRuntimeError as e:
        return error_response(e)
    return ContextResponse(context=merged)
