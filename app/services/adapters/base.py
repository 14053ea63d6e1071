import abc
from typing import List

from app.models.schemas import ChatMessage


class GenerationService(abc.ABC):
    """
    Контракт модели генерации текста.
    Адаптер обязан привести ответ провайдера к строке.
    """

    @abc.abstractmethod
    async def generate(self, messages: List[ChatMessage], max_tokens: int, temperature: float) -> str:
        """
        Выполняет chat completion запрос.

        Args:
            messages: упорядоченный список сообщений (system, история, user)
            max_tokens: лимит токенов ответа
            temperature: температура сэмплирования

        Returns:
            str: текст ответа

        Raises:
            GenerationError: провайдер недоступен или вернул пустой ответ
        """
        pass


class VisionService(abc.ABC):
    """Контракт модели анализа изображений."""

    @abc.abstractmethod
    async def describe(self, image_bytes: bytes, prompt: str) -> str:
        """
        Возвращает текстовое описание изображения.

        Любой формат ответа провайдера нормализуется в строку внутри адаптера.
        """
        pass


class ContextProvider(abc.ABC):
    """
    Внешние справки для обогащения контекста.
    Методы не выбрасывают ошибки наружу: при сбое возвращается
    человекочитаемая строка-заглушка.
    """

    @abc.abstractmethod
    async def lookup_weather(self, city: str) -> str:
        pass

    @abc.abstractmethod
    async def lookup_news(self, query: str) -> str:
        pass

    @abc.abstractmethod
    async def current_time(self) -> str:
        pass
