"""
Внешние справки: погода (Open-Meteo) и краткие ответы (DuckDuckGo).

Любая ошибка сети или формата ответа превращается в строку-заглушку,
поэтому методы провайдера никогда не выбрасывают исключения наружу.
"""

import logging
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Optional

import httpx

from app.core.config import AppConfig

from .base import ContextProvider

logger = logging.getLogger("chat-runtime.adapters.context_provider")

GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
FORECAST_URL = "https://api.open-meteo.com/v1/forecast"
SEARCH_URL = "https://api.duckduckgo.com/"

WEATHER_CODES = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Foggy",
    51: "Light drizzle",
    61: "Light rain",
    63: "Moderate rain",
    65: "Heavy rain",
    80: "Rain showers",
    95: "Thunderstorm",
}


class HTTPContextProvider(ContextProvider):
    """Справочный провайдер поверх публичных HTTP API."""

    def __init__(self, timeout: Optional[float] = None):
        self._timeout = timeout or AppConfig.LOOKUP_TIMEOUT

    async def lookup_weather(self, city: str) -> str:
        """
        Текущая погода в городе.

        Args:
            city: Название города

        Returns:
            Строка вида "Weather in Paris, France: Clear sky, Temperature: ..."
        """
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                geo_response = await client.get(
                    GEOCODING_URL,
                    params={"name": city, "count": 1, "language": "en", "format": "json"},
                )
                geo_response.raise_for_status()
                results = geo_response.json().get("results") or []
                if not results:
                    return f"Could not find weather data for {city}"

                place = results[0]
                weather_response = await client.get(
                    FORECAST_URL,
                    params={
                        "latitude": place["latitude"],
                        "longitude": place["longitude"],
                        "current": "temperature_2m,relative_humidity_2m,weather_code,wind_speed_10m",
                        "timezone": "auto",
                    },
                )
                weather_response.raise_for_status()
                current = weather_response.json()["current"]

            condition = WEATHER_CODES.get(current.get("weather_code"), "Unknown")
            return (
                f"Weather in {place.get('name', city)}, {place.get('country', '')}: {condition}, "
                f"Temperature: {current['temperature_2m']}°C, "
                f"Humidity: {current['relative_humidity_2m']}%, "
                f"Wind: {current['wind_speed_10m']} km/h"
            )
        except (httpx.HTTPError, AttributeError, KeyError, TypeError, ValueError) as e:
            logger.warning(f"Weather lookup for {city!r} failed: {e}")
            return "Unable to fetch weather data"

    async def lookup_news(self, query: str) -> str:
        """Краткий ответ поисковика на запрос пользователя."""
        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                response = await client.get(
                    SEARCH_URL,
                    params={"q": query, "format": "json", "no_html": 1, "skip_disambig": 1},
                )
                response.raise_for_status()
                data = response.json()
            abstract = data.get("AbstractText")
            topics = data.get("RelatedTopics") or []
        except (httpx.HTTPError, AttributeError, ValueError) as e:
            logger.warning(f"Search for {query!r} failed: {e}")
            return "Unable to search"

        if abstract:
            return f"Search result: {abstract}"
        if isinstance(topics, list) and topics and isinstance(topics[0], dict) and topics[0].get("Text"):
            return f"Search result: {topics[0]['Text']}"
        return f"No information found for: {query}"

    async def current_time(self) -> str:
        now = datetime.now(timezone.utc)
        return f"Current date and time: {format_datetime(now, usegmt=True)} (UTC)"
