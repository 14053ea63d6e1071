import logging
import pprint
from typing import List, Optional

import httpx

from app.core.config import AppConfig
from app.core.errors import GenerationError
from app.models.schemas import ChatMessage

from .base import GenerationService

logger = logging.getLogger("chat-runtime.adapters.llm_proxy")


class LLMProxyGenerationService(GenerationService):
    """
    Генерация через OpenAI-совместимый REST API (LLM Proxy / LiteLLM).
    """

    def __init__(
        self,
        api_url: Optional[str] = None,
        api_key: Optional[str] = None,
        model: Optional[str] = None,
        timeout: Optional[float] = None,
    ):
        self.api_url = (api_url or AppConfig.LLM_PROXY_URL).rstrip("/")
        self.api_key = api_key if api_key is not None else AppConfig.LLM_API_KEY
        self.model = model or AppConfig.LLM_MODEL
        self.timeout = timeout or AppConfig.LLM_TIMEOUT

    async def generate(self, messages: List[ChatMessage], max_tokens: int, temperature: float) -> str:
        payload = {
            "model": self.model,
            "messages": [m.model_dump() for m in messages],
            "max_tokens": max_tokens,
            "temperature": temperature,
            "stream": False,
        }
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}

        logger.info(f"[LLMProxy] POST {self.api_url}/v1/chat/completions messages={len(messages)}")
        logger.debug("[LLMProxy] Payload:\n" + pprint.pformat(payload, indent=2, width=120))

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.api_url}/v1/chat/completions",
                    json=payload,
                    headers=headers,
                )
            response.raise_for_status()
            data = response.json()
        except httpx.HTTPStatusError as e:
            logger.error(f"[LLMProxy] HTTP error {e.response.status_code}: {e.response.text[:256]}")
            raise GenerationError(reason="HTTP error from LLM proxy", status_code=e.response.status_code) from e
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"[LLMProxy] Exception in generate: {e}", exc_info=True)
            raise GenerationError(reason=str(e)) from e

        logger.debug("[LLMProxy] Response JSON:\n" + pprint.pformat(data, indent=2, width=120))
        return self._extract_text(data)

    @staticmethod
    def _extract_text(data: dict) -> str:
        """Привести ответ chat/completions к строке."""
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError):
            raise GenerationError(reason="Malformed chat completion response")

        if not isinstance(content, str) or not content.strip():
            raise GenerationError(reason="Empty completion")
        return content
