"""
Тесты обогащения: классификатор намерений, извлечение файлов, координатор.
"""
import asyncio
import base64

import pytest
from unittest.mock import AsyncMock

from app.services.adapters import FakeVisionService
from app.services.enrichment import (
    EnrichmentCoordinator,
    FileExtractor,
    FileKind,
    ImageAnalyzer,
    LookupIntent,
    LookupKind,
    classify_file,
    classify_intent,
)
from app.services.enrichment.file_extractor import MAX_PREVIEW_CHARS
from app.services.enrichment.image_analyzer import GENERIC_IMAGE_PROMPT, build_image_prompt
from app.services.enrichment.media import decode_data_url


def data_url(raw: bytes, mime: str = "application/octet-stream") -> str:
    return f"data:{mime};base64,{base64.b64encode(raw).decode('ascii')}"


# ==================== Intent ====================

@pytest.mark.parametrize(
    "message,expected",
    [
        ("What's the weather in Paris?", LookupIntent(LookupKind.WEATHER, "Paris")),
        ("temperature in New York.", LookupIntent(LookupKind.WEATHER, "New York")),
        ("What time is it?", LookupIntent(LookupKind.TIME)),
        ("Any news about Python?", LookupIntent(LookupKind.NEWS, "Any news about Python?")),
        ("Write me a poem", None),
        ("", None),
    ],
)
def test_classify_intent(message, expected):
    assert classify_intent(message) == expected


def test_weather_without_city_falls_through():
    assert classify_intent("How is the weather") is None
    assert classify_intent("weather today?") == LookupIntent(LookupKind.TIME)


# ==================== Media ====================

def test_decode_data_url():
    assert decode_data_url(data_url(b"abc")) == b"abc"


def test_decode_rejects_non_data_url():
    with pytest.raises(ValueError):
        decode_data_url("not a data url")


# ==================== Files ====================

@pytest.mark.parametrize(
    "file_name,kind",
    [
        ("photo.JPG", FileKind.IMAGE),
        ("notes.md", FileKind.TEXT),
        ("script.py", FileKind.TEXT),
        ("report.pdf", FileKind.PDF),
        ("archive.zip", FileKind.UNKNOWN),
        ("README", FileKind.UNKNOWN),
    ],
)
def test_classify_file(file_name, kind):
    assert classify_file(file_name) is kind


@pytest.fixture
def extractor():
    return FileExtractor(ImageAnalyzer(FakeVisionService()))


@pytest.mark.asyncio
async def test_text_file_contents(extractor):
    result = await extractor.extract("notes.txt", data_url(b"hello world"))

    assert result == 'File "notes.txt" contents:\n\nhello world'


@pytest.mark.asyncio
async def test_text_file_truncated(extractor):
    """Файл на 20000 символов усечен до 8000 с пометкой"""
    result = await extractor.extract("big.txt", data_url(b"x" * 20000))

    body = result.split("\n\n", 1)[1]
    assert body.startswith("x" * MAX_PREVIEW_CHARS + "...")
    assert "x" * (MAX_PREVIEW_CHARS + 1) not in body
    assert body.endswith("[File truncated - showing first 8000 characters]")


@pytest.mark.asyncio
async def test_pdf_with_readable_text(extractor):
    raw = b"%PDF-1.4\n" + b"\x00".join(b"Readable sentence number %d here." % i for i in range(20))

    result = await extractor.extract("doc.pdf", data_url(raw))

    assert result.startswith('PDF file "doc.pdf" content (extracted text):')
    assert "Readable sentence number 7 here." in result


@pytest.mark.asyncio
async def test_pdf_without_text_asks_for_paste(extractor):
    raw = bytes(range(128, 256)) * 10

    result = await extractor.extract("scan.pdf", data_url(raw))

    assert result.startswith('PDF file "scan.pdf" uploaded.')
    assert "copy-paste the text" in result


@pytest.mark.asyncio
async def test_unknown_file_notice(extractor):
    result = await extractor.extract("archive.zip", data_url(b"PK\x03\x04"))

    assert result.startswith('File "archive.zip" uploaded (ZIP format).')


@pytest.mark.asyncio
async def test_image_file_goes_through_vision(extractor):
    result = await extractor.extract("photo.png", data_url(b"1234", "image/png"), "what is this?")

    assert result == 'Image file "photo.png" analysis:\n\nMock image description (4 bytes)'


def test_image_prompt_uses_question():
    assert "answer the following question: what is this?" in build_image_prompt("what is this?")
    assert build_image_prompt(None) == GENERIC_IMAGE_PROMPT


# ==================== Coordinator ====================

@pytest.mark.asyncio
async def test_no_tasks_returns_empty_bundle(context_provider):
    vision = AsyncMock()
    coordinator = EnrichmentCoordinator(vision, context_provider)

    bundle = await coordinator.enrich("Hello")

    assert bundle.is_empty
    assert context_provider.calls == []
    vision.describe.assert_not_called()


@pytest.mark.asyncio
async def test_weather_lookup_called_once(context_provider, vision):
    coordinator = EnrichmentCoordinator(vision, context_provider)

    bundle = await coordinator.enrich("What's the weather in Paris?")

    assert context_provider.calls == [("weather", "Paris")]
    assert bundle.external_context == "Weather in Paris, France: Clear sky"
    assert bundle.image_context is None
    assert bundle.file_context is None


@pytest.mark.asyncio
async def test_failed_lookup_leaves_field_empty(vision):
    from tests.conftest import RecordingContextProvider

    provider = RecordingContextProvider(fail=True)
    coordinator = EnrichmentCoordinator(vision, provider)

    bundle = await coordinator.enrich("Any news about Python?", image=data_url(b"img"))

    assert bundle.external_context is None
    assert bundle.image_context == "Mock image description (3 bytes)"


@pytest.mark.asyncio
async def test_vision_failure_is_isolated(context_provider):
    vision = AsyncMock()
    vision.describe.side_effect = RuntimeError("vision down")
    coordinator = EnrichmentCoordinator(vision, context_provider)

    bundle = await coordinator.enrich(
        "summarize",
        image=data_url(b"img"),
        file=data_url(b"file body"),
        file_name="notes.txt",
    )

    assert bundle.image_context is None
    assert bundle.file_context == 'File "notes.txt" contents:\n\nfile body'


@pytest.mark.asyncio
async def test_file_without_name_is_skipped(context_provider, vision):
    coordinator = EnrichmentCoordinator(vision, context_provider)

    bundle = await coordinator.enrich("", file=data_url(b"body"))

    assert bundle.is_empty


@pytest.mark.asyncio
async def test_tasks_run_concurrently(context_provider):
    """Задачи изображения и справки выполняются параллельно"""
    started = []
    release = asyncio.Event()

    class SlowVision:
        async def describe(self, image_bytes, prompt):
            started.append("image")
            await release.wait()
            return "slow description"

    class SlowProvider(type(context_provider)):
        async def current_time(self):
            started.append("time")
            release.set()
            return "Current date and time: now"

    coordinator = EnrichmentCoordinator(SlowVision(), SlowProvider())

    bundle = await asyncio.wait_for(
        coordinator.enrich("what time is it?", image=data_url(b"img")),
        timeout=5,
    )

    assert sorted(started) == ["image", "time"]
    assert bundle.image_context == "slow description"
    assert bundle.external_context == "Current date and time: now"


@pytest.mark.asyncio
async def test_failed_weather_lookup_leaves_field_empty(vision):
    from tests.conftest import RecordingContextProvider

    provider = RecordingContextProvider(fail=True)
    coordinator = EnrichmentCoordinator(vision, provider)

    bundle = await coordinator.enrich("What's the weather in Paris?")

    assert provider.calls == [("weather", "Paris")]
    assert bundle.external_context is None
    assert bundle.is_empty


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "message,expected_call",
    [
        ("weather in Paris? any latest news today", ("weather", "Paris")),
        ("what day is it, any latest news?", ("time", "")),
        ("latest news on the weather", ("news", "latest news on the weather")),
    ],
)
async def test_first_matching_intent_wins(context_provider, vision, message, expected_call):
    coordinator = EnrichmentCoordinator(vision, context_provider)

    bundle = await coordinator.enrich(message)

    assert context_provider.calls == [expected_call]
    assert bundle.external_context is not None
