"""
Pytest configuration and fixtures.
"""
import copy
from typing import Any, Dict, List, Optional, Set, Tuple

import pytest

from app.core.errors import PersistenceError
from app.infrastructure.persistence import StateStore
from app.services.adapters import FakeGenerationService, FakeVisionService
from app.services.adapters.base import ContextProvider


class InMemoryStateStore(StateStore):
    """
    StateStore в памяти для unit тестов.

    fail_on: набор операций ("load", "save", "delete"), которые должны
    завершаться PersistenceError.
    """

    def __init__(self):
        self.records: Dict[Tuple[str, str, str], Any] = {}
        self.fail_on: Set[str] = set()
        self.calls: List[Tuple[str, str, str, str]] = []

    def _check(self, operation: str, namespace: str, key: str, record: str) -> None:
        self.calls.append((operation, namespace, key, record))
        if operation in self.fail_on:
            raise PersistenceError(operation=operation, record=record, reason="injected failure")

    async def load(self, namespace: str, key: str, record: str) -> Optional[Any]:
        self._check("load", namespace, key, record)
        return copy.deepcopy(self.records.get((namespace, key, record)))

    async def save(self, namespace: str, key: str, record: str, value: Any) -> None:
        self._check("save", namespace, key, record)
        self.records[(namespace, key, record)] = copy.deepcopy(value)

    async def delete(self, namespace: str, key: str, record: str) -> None:
        self._check("delete", namespace, key, record)
        self.records.pop((namespace, key, record), None)


class RecordingContextProvider(ContextProvider):
    """Провайдер справок, запоминающий вызовы."""

    def __init__(self, weather: str = "Weather in Paris, France: Clear sky", fail: bool = False):
        self.weather = weather
        self.fail = fail
        self.calls: List[Tuple[str, str]] = []

    async def lookup_weather(self, city: str) -> str:
        self.calls.append(("weather", city))
        if self.fail:
            raise RuntimeError("lookup backend down")
        return self.weather

    async def lookup_news(self, query: str) -> str:
        self.calls.append(("news", query))
        if self.fail:
            raise RuntimeError("lookup backend down")
        return f"Search result: {query}"

    async def current_time(self) -> str:
        self.calls.append(("time", ""))
        return "Current date and time: Sat, 17 Oct 2026 12:00:00 GMT (UTC)"


@pytest.fixture
def store():
    """Пустое хранилище в памяти"""
    return InMemoryStateStore()


@pytest.fixture
def context_provider():
    return RecordingContextProvider()


@pytest.fixture
def generation():
    return FakeGenerationService(reply="Hi there")


@pytest.fixture
def vision():
    return FakeVisionService()
