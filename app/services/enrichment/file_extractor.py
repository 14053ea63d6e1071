"""
Извлечение текста из загруженных файлов.

Тип файла определяется по расширению:
- изображения передаются в ImageAnalyzer;
- текстовые форматы (включая код и разметку) декодируются напрямую;
- для PDF выполняется грубое извлечение печатных символов из байтов;
- для остальных возвращается сообщение-заглушка.
"""

import logging
import re
from enum import Enum
from typing import Optional

from .image_analyzer import ImageAnalyzer
from .media import decode_data_url_async

logger = logging.getLogger("chat-runtime.enrichment.file")

MAX_PREVIEW_CHARS = 8000
PDF_MIN_RUNS = 10
PDF_MIN_CHARS = 100

IMAGE_EXTENSIONS = frozenset({"jpg", "jpeg", "png", "gif", "webp", "bmp"})
TEXT_EXTENSIONS = frozenset({
    "txt", "md", "json", "csv", "html", "xml", "js", "ts", "py", "java", "c", "cpp",
    "css", "yml", "yaml", "toml", "ini", "log", "sql", "sh", "bash",
})

PDF_TEXT_RUN = re.compile(r"[A-Za-z0-9\s.,;:!?\-'\"()]+")


class FileKind(str, Enum):
    IMAGE = "image"
    TEXT = "text"
    PDF = "pdf"
    UNKNOWN = "unknown"


def file_extension(file_name: str) -> str:
    """Часть имени после последней точки (или всё имя, если точки нет)."""
    return file_name.split(".")[-1].lower()


def classify_file(file_name: str) -> FileKind:
    extension = file_extension(file_name)
    if extension in IMAGE_EXTENSIONS:
        return FileKind.IMAGE
    if extension in TEXT_EXTENSIONS:
        return FileKind.TEXT
    if extension == "pdf":
        return FileKind.PDF
    return FileKind.UNKNOWN


def text_preview(file_name: str, raw: bytes) -> str:
    text = raw.decode("utf-8", errors="replace")
    if len(text) > MAX_PREVIEW_CHARS:
        text = (
            text[:MAX_PREVIEW_CHARS]
            + f"...\n\n[File truncated - showing first {MAX_PREVIEW_CHARS} characters]"
        )
    return f'File "{file_name}" contents:\n\n{text}'


def pdf_preview(file_name: str, raw: bytes) -> str:
    """
    Best-effort извлечение текста из PDF без парсинга структуры.

    Работает только для несжатых текстовых PDF; если читаемого текста
    слишком мало, пользователь получает просьбу вставить текст вручную.
    """
    runs = PDF_TEXT_RUN.findall(raw.decode("latin-1"))
    if len(runs) > PDF_MIN_RUNS:
        extracted = " ".join(runs)[:MAX_PREVIEW_CHARS]
        if len(extracted) > PDF_MIN_CHARS:
            logger.info(f"Extracted {len(extracted)} chars from PDF {file_name}")
            marker = ""
            if len(extracted) == MAX_PREVIEW_CHARS:
                marker = f"\n\n[Content truncated - showing first {MAX_PREVIEW_CHARS} characters]"
            return f'PDF file "{file_name}" content (extracted text):\n\n{extracted}{marker}'

    logger.info(f"Could not extract readable text from PDF {file_name}")
    return (
        f'PDF file "{file_name}" uploaded. I can see it\'s a PDF but couldn\'t extract the text '
        "automatically. Could you tell me what's in the document or copy-paste the text?"
    )


def unknown_file_notice(file_name: str) -> str:
    extension = file_extension(file_name).upper() or "UNKNOWN"
    return (
        f'File "{file_name}" uploaded ({extension} format). '
        "Please tell me what you'd like to know about this file."
    )


class FileExtractor:
    def __init__(self, image_analyzer: ImageAnalyzer) -> None:
        self._images = image_analyzer

    async def extract(self, file_name: str, file_data_url: str, question: Optional[str] = None) -> str:
        """
        Превратить загруженный файл в текстовый контекст.

        Args:
            file_name: Имя файла (по нему определяется тип)
            file_data_url: Содержимое в виде data URL
            question: Вопрос пользователя (используется для изображений)
        """
        kind = classify_file(file_name)
        logger.info(f"Extracting file {file_name!r} as {kind.value}")

        if kind is FileKind.IMAGE:
            analysis = await self._images.analyze(file_data_url, question)
            return f'Image file "{file_name}" analysis:\n\n{analysis}'

        if kind is FileKind.UNKNOWN:
            return unknown_file_notice(file_name)

        raw = await decode_data_url_async(file_data_url)
        if kind is FileKind.TEXT:
            return text_preview(file_name, raw)
        return pdf_preview(file_name, raw)
