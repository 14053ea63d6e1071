"""
Лёгкий классификатор намерений для внешних справок.

Проверки подстрок в порядке приоритета: погода, время, новости.
За ход выбирается не больше одного намерения.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Optional


class LookupKind(str, Enum):
    WEATHER = "weather"
    TIME = "time"
    NEWS = "news"


@dataclass(frozen=True)
class LookupIntent:
    kind: LookupKind
    argument: str = ""


WEATHER_KEYWORDS = ("weather", "temperature")
TIME_KEYWORDS = ("time", "date", "day")
NEWS_KEYWORDS = ("news", "latest", "current")

# "... in <city>" до "?", "." или конца строки
CITY_PATTERN = re.compile(r"in\s+([a-zA-Z\s]+?)(?:\?|$|\.)", re.IGNORECASE)


def extract_city(message: str) -> Optional[str]:
    match = CITY_PATTERN.search(message)
    if not match:
        return None
    city = match.group(1).strip()
    return city or None


def classify_intent(message: str) -> Optional[LookupIntent]:
    """
    Определить справку, нужную для сообщения.

    Погода без названия города не распознаётся как погода,
    и проверка переходит к следующему намерению.

    Args:
        message: Текст пользователя

    Returns:
        LookupIntent или None, если справка не нужна
    """
    if not message:
        return None
    lowered = message.lower()

    if any(word in lowered for word in WEATHER_KEYWORDS):
        city = extract_city(message)
        if city:
            return LookupIntent(LookupKind.WEATHER, city)

    if any(word in lowered for word in TIME_KEYWORDS):
        return LookupIntent(LookupKind.TIME)

    if any(word in lowered for word in NEWS_KEYWORDS):
        return LookupIntent(LookupKind.NEWS, message)

    return None
