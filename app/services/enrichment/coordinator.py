"""
EnrichmentCoordinator: fan-out/fan-in of per-turn context tasks.

Up to three independent tasks run concurrently (image, file, one external
lookup). Each task is wrapped into an EnrichmentResult so a failure only
empties its own bundle field and never reaches the caller.
"""
import asyncio
import logging
from typing import Awaitable, List, Optional

from app.core.errors import EnrichmentFailure
from app.models.schemas import EnrichmentBundle, EnrichmentResult
from app.services.adapters.base import ContextProvider, VisionService

from .file_extractor import FileExtractor
from .image_analyzer import ImageAnalyzer
from .intent import LookupIntent, LookupKind, classify_intent

logger = logging.getLogger("chat-runtime.enrichment")


class EnrichmentCoordinator:
    """
    Coordinates enrichment for one turn.

    No retries and no timeout at this layer: the turn waits for the
    slowest scheduled task.
    """

    def __init__(self, vision: VisionService, context_provider: ContextProvider):
        self._images = ImageAnalyzer(vision)
        self._files = FileExtractor(self._images)
        self._context = context_provider

    async def enrich(
        self,
        message: str,
        image: Optional[str] = None,
        file: Optional[str] = None,
        file_name: Optional[str] = None,
    ) -> EnrichmentBundle:
        """
        Gather context for a turn.

        Args:
            message: Raw user text (may be empty)
            image: Image as data URL
            file: File as data URL
            file_name: Original file name, required for file extraction

        Returns:
            EnrichmentBundle with one field per successful task
        """
        tasks: List[Awaitable[EnrichmentResult]] = []

        if image:
            tasks.append(self._guard("image", self._images.analyze(image, message or None)))

        if file and file_name:
            tasks.append(self._guard("file", self._files.extract(file_name, file, message or None)))

        intent = classify_intent(message)
        if intent is not None:
            tasks.append(self._guard("external", self._lookup(intent)))

        if not tasks:
            return EnrichmentBundle()

        logger.info(
            f"Running {len(tasks)} enrichment task(s): image={bool(image)}, "
            f"file={bool(file and file_name)}, lookup={intent.kind.value if intent else None}"
        )
        results = await asyncio.gather(*tasks)
        return self._merge(results)

    async def _lookup(self, intent: LookupIntent) -> str:
        if intent.kind is LookupKind.WEATHER:
            return await self._context.lookup_weather(intent.argument)
        if intent.kind is LookupKind.TIME:
            return await self._context.current_time()
        return await self._context.lookup_news(intent.argument)

    async def _guard(self, kind: str, task: Awaitable[Optional[str]]) -> EnrichmentResult:
        """Run one task and convert any error into an EnrichmentFailure value."""
        try:
            text = await task
        except Exception as e:
            logger.warning(f"Enrichment task '{kind}' failed: {e}", exc_info=True)
            return EnrichmentResult(kind=kind, failure=EnrichmentFailure(kind, str(e)))
        return EnrichmentResult(kind=kind, text=text or None)

    @staticmethod
    def _merge(results: List[EnrichmentResult]) -> EnrichmentBundle:
        bundle = EnrichmentBundle()
        for result in results:
            if not result.ok:
                continue
            if result.kind == "image":
                bundle.image_context = result.text
            elif result.kind == "file":
                bundle.file_context = result.text
            else:
                bundle.external_context = result.text
        return bundle
