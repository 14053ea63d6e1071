"""Vision adapter built on the OpenAI chat completions API."""

import base64
import logging
from typing import Any, Optional

from openai import AsyncOpenAI

from app.core.config import AppConfig

from .base import VisionService

logger = logging.getLogger("chat-runtime.adapters.openai_vision")

VISION_MAX_TOKENS = 1024
FALLBACK_DESCRIPTION = "Image analyzed successfully."


def guess_image_mime(image_bytes: bytes) -> str:
    """Detect the image type from its signature; JPEG when unrecognised."""
    if image_bytes.startswith(b"\x89PNG\r\n\x1a\n"):
        return "image/png"
    if image_bytes[:6] in (b"GIF87a", b"GIF89a"):
        return "image/gif"
    if image_bytes[:4] == b"RIFF" and image_bytes[8:12] == b"WEBP":
        return "image/webp"
    if image_bytes.startswith(b"BM"):
        return "image/bmp"
    return "image/jpeg"


def to_image_data_url(image_bytes: bytes, mime_type: Optional[str] = None) -> str:
    """Convert raw image bytes into a data URL suitable for vision input."""
    mime_type = mime_type or guess_image_mime(image_bytes)
    return f"data:{mime_type};base64,{base64.b64encode(image_bytes).decode('ascii')}"


def normalize_vision_output(raw: Any) -> str:
    """
    Reduce whatever the provider returned to plain text.

    Accepts a bare string, a dict carrying description/response/text,
    or a chat completion object.
    """
    if isinstance(raw, str):
        return raw.strip() or FALLBACK_DESCRIPTION

    if isinstance(raw, dict):
        for field in ("description", "response", "text"):
            value = raw.get(field)
            if isinstance(value, str) and value.strip():
                return value.strip()
        return FALLBACK_DESCRIPTION

    choices = getattr(raw, "choices", None)
    if choices:
        content = getattr(choices[0].message, "content", None)
        if isinstance(content, str) and content.strip():
            return content.strip()
    return FALLBACK_DESCRIPTION


class OpenAIVisionService(VisionService):
    """Describe images with an OpenAI-compatible multimodal model."""

    def __init__(
        self,
        client: Optional[AsyncOpenAI] = None,
        model: Optional[str] = None,
    ) -> None:
        self.client = client or AsyncOpenAI(
            api_key=AppConfig.OPENAI_API_KEY,
            base_url=AppConfig.OPENAI_BASE_URL,
        )
        self.model = model or AppConfig.VISION_MODEL

    async def describe(self, image_bytes: bytes, prompt: str) -> str:
        logger.info(f"[OpenAIVision] Describing image of {len(image_bytes)} bytes with model {self.model}")
        response = await self.client.chat.completions.create(
            model=self.model,
            max_tokens=VISION_MAX_TOKENS,
            messages=[
                {
                    "role": "user",
                    "content": [
                        {"type": "text", "text": prompt},
                        {"type": "image_url", "image_url": {"url": to_image_data_url(image_bytes)}},
                    ],
                }
            ],
        )
        return normalize_vision_output(response)
