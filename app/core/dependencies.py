"""
Dependency wiring for the chat runtime.

Builds the adapters selected by configuration and the service container
shared by all requests (stored on app.state by the lifespan).
"""
from dataclasses import dataclass
from typing import Optional

from fastapi import Request

from app.core.config import AppConfig
from app.infrastructure.persistence import StateStore
from app.services.adapters import (
    ContextProvider,
    FakeGenerationService,
    FakeVisionService,
    GenerationService,
    HTTPContextProvider,
    LLMProxyGenerationService,
    OpenAIVisionService,
    VisionService,
)
from app.services.conversation_digest import ConversationDigest
from app.services.enrichment import EnrichmentCoordinator
from app.services.orchestrator import ChatOrchestrator
from app.services.prompt_assembler import PromptAssembler
from app.services.session_directory import SessionDirectory
from app.services.session_log import SessionLog


def get_generation_service() -> GenerationService:
    """
    Возвращает адаптер генерации в зависимости от режима работы.
    - mock: FakeGenerationService для тестирования
    - proxy: LLMProxyGenerationService (OpenAI-совместимый chat/completions)
    """
    llm_mode = (AppConfig.LLM_MODE or "mock").lower()
    if llm_mode == "proxy":
        return LLMProxyGenerationService()
    return FakeGenerationService()


def get_vision_service() -> VisionService:
    """
    Возвращает адаптер анализа изображений.
    - mock: FakeVisionService
    - openai: OpenAIVisionService
    """
    vision_mode = (AppConfig.VISION_MODE or "mock").lower()
    if vision_mode == "openai":
        return OpenAIVisionService()
    return FakeVisionService()


@dataclass
class ServiceContainer:
    session_log: SessionLog
    directory: SessionDirectory
    orchestrator: ChatOrchestrator
    digest: ConversationDigest


def build_container(
    store: StateStore,
    generation: Optional[GenerationService] = None,
    vision: Optional[VisionService] = None,
    context_provider: Optional[ContextProvider] = None,
    assembler: Optional[PromptAssembler] = None,
) -> ServiceContainer:
    """
    Собрать сервисы поверх одного хранилища.

    Args:
        store: Долговременное хранилище состояния акторов
        generation: Адаптер генерации (по умолчанию по конфигурации)
        vision: Адаптер анализа изображений (по умолчанию по конфигурации)
        context_provider: Провайдер справок (по умолчанию HTTP)
        assembler: Сборщик промпта (по умолчанию с системными часами)
    """
    session_log = SessionLog(store)
    directory = SessionDirectory(store)
    orchestrator = ChatOrchestrator(
        enrichment=EnrichmentCoordinator(
            vision=vision or get_vision_service(),
            context_provider=context_provider or HTTPContextProvider(),
        ),
        assembler=assembler or PromptAssembler(),
        generation=generation or get_generation_service(),
        session_log=session_log,
        directory=directory,
    )
    return ServiceContainer(
        session_log=session_log,
        directory=directory,
        orchestrator=orchestrator,
        digest=ConversationDigest(directory, session_log),
    )


def get_container(request: Request) -> ServiceContainer:
    """Get the service container created by the application lifespan"""
    return request.app.state.container


def get_session_log(request: Request) -> SessionLog:
    return get_container(request).session_log


def get_session_directory(request: Request) -> SessionDirectory:
    return get_container(request).directory


def get_orchestrator(request: Request) -> ChatOrchestrator:
    return get_container(request).orchestrator


def get_conversation_digest(request: Request) -> ConversationDigest:
    return get_container(request).digest
