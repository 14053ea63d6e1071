"""
Обогащение контекста хода: изображения, файлы, внешние справки.
"""

from .coordinator import EnrichmentCoordinator
from .file_extractor import FileExtractor, FileKind, classify_file
from .image_analyzer import ImageAnalyzer
from .intent import LookupIntent, LookupKind, classify_intent

__all__ = [
    "EnrichmentCoordinator",
    "FileExtractor",
    "FileKind",
    "classify_file",
    "ImageAnalyzer",
    "LookupIntent",
    "LookupKind",
    "classify_intent",
]
