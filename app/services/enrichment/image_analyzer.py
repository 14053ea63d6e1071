"""Image understanding task of the enrichment fan-out."""

import logging
from typing import Optional

from app.services.adapters.base import VisionService

from .media import decode_data_url_async

logger = logging.getLogger("chat-runtime.enrichment.image")

GENERIC_IMAGE_PROMPT = (
    "Describe this image in comprehensive detail. Include: objects, people, text visible in the image, "
    "colors, setting, actions, emotions, and any other relevant details. "
    "If there's text in the image, transcribe it exactly."
)


def build_image_prompt(question: Optional[str]) -> str:
    """Use the user's question when there is one, otherwise ask for a full description."""
    if question:
        return (
            f"Analyze this image and answer the following question: {question}. "
            "Provide detailed observations and insights."
        )
    return GENERIC_IMAGE_PROMPT


class ImageAnalyzer:
    def __init__(self, vision: VisionService) -> None:
        self._vision = vision

    async def analyze(self, image_data_url: str, question: Optional[str] = None) -> str:
        """Decode the data URL and ask the vision model about it."""
        image_bytes = await decode_data_url_async(image_data_url)
        logger.info(f"Analyzing image: {len(image_bytes)} bytes, has_question={bool(question)}")
        description = await self._vision.describe(image_bytes, build_image_prompt(question))
        logger.debug(f"Image analysis complete: {description[:100]!r}")
        return description
