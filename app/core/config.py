import logging
import os

from dotenv import load_dotenv

load_dotenv()


class AppConfig:
    DATABASE_URL: str = os.getenv("CHAT_RUNTIME__DATABASE_URL", "sqlite:///data/chat_runtime.db")
    LOG_LEVEL: str = os.getenv("CHAT_RUNTIME__LOG_LEVEL", "INFO")
    VERSION: str = os.getenv("CHAT_RUNTIME__VERSION", "0.1.0")

    # Генерация текста: mock для тестов, proxy для OpenAI-совместимого chat/completions
    LLM_MODE: str = os.getenv("CHAT_RUNTIME__LLM_MODE", "mock")  # mock | proxy
    LLM_PROXY_URL: str = os.getenv("CHAT_RUNTIME__LLM_PROXY_URL", "http://localhost:8002")
    LLM_API_KEY: str = os.getenv("CHAT_RUNTIME__LLM_API_KEY", "")
    LLM_MODEL: str = os.getenv("CHAT_RUNTIME__LLM_MODEL", "llama-3.3-70b-instruct")
    LLM_TIMEOUT: float = float(os.getenv("CHAT_RUNTIME__LLM_TIMEOUT", "360.0"))

    # Анализ изображений
    VISION_MODE: str = os.getenv("CHAT_RUNTIME__VISION_MODE", "mock")  # mock | openai
    VISION_MODEL: str = os.getenv("CHAT_RUNTIME__VISION_MODEL", "gpt-4o-mini")
    OPENAI_API_KEY: str | None = os.getenv("CHAT_RUNTIME__OPENAI_API_KEY")
    OPENAI_BASE_URL: str | None = os.getenv("CHAT_RUNTIME__OPENAI_BASE_URL")

    # Внешние справки (погода, новости)
    LOOKUP_TIMEOUT: float = float(os.getenv("CHAT_RUNTIME__LOOKUP_TIMEOUT", "10.0"))


logging.basicConfig(level=AppConfig.LOG_LEVEL)
logger = logging.getLogger("chat-runtime")
