"""
Адаптеры внешних возможностей: генерация, анализ изображений, справки.
"""

from .base import GenerationService, VisionService, ContextProvider
from .context_provider import HTTPContextProvider
from .fake import FakeGenerationService, FakeVisionService
from .llm_proxy import LLMProxyGenerationService
from .openai_vision import OpenAIVisionService

__all__ = [
    "GenerationService",
    "VisionService",
    "ContextProvider",
    "HTTPContextProvider",
    "FakeGenerationService",
    "FakeVisionService",
    "LLMProxyGenerationService",
    "OpenAIVisionService",
]
