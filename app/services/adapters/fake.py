import logging
import pprint
from typing import List

from app.models.schemas import ChatMessage

from .base import GenerationService, VisionService

logger = logging.getLogger("chat-runtime.adapters.fake")


class FakeGenerationService(GenerationService):
    """Детерминированный ответ, не зависящий от ввода (режим mock)."""

    def __init__(self, reply: str = "Mock LLM response (static)"):
        self.reply = reply

    async def generate(self, messages: List[ChatMessage], max_tokens: int, temperature: float) -> str:
        logger.debug(
            "[FakeGeneration] generate called with:\n"
            + pprint.pformat([m.model_dump() for m in messages], indent=2, width=120)
        )
        return self.reply


class FakeVisionService(VisionService):
    async def describe(self, image_bytes: bytes, prompt: str) -> str:
        logger.debug(f"[FakeVision] describe called: {len(image_bytes)} bytes, prompt={prompt[:80]!r}")
        return f"Mock image description ({len(image_bytes)} bytes)"
