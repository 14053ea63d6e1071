"""
ChatOrchestrator: the per-turn procedure.

enrichment -> history -> prompt -> generation -> commit to SessionLog
-> preview refresh in SessionDirectory.
"""
import logging

from app.core.errors import (
    ChatRuntimeError,
    ConversationNotFoundError,
    GenerationError,
    PersistenceError,
    TurnFailedError,
    TurnValidationError,
)
from app.models.schemas import TurnInput, TurnResult
from app.services.adapters.base import GenerationService
from app.services.enrichment import EnrichmentCoordinator
from app.services.prompt_assembler import PromptAssembler
from app.services.session_directory import SessionDirectory
from app.services.session_log import SessionLog

logger = logging.getLogger("chat-runtime.orchestrator")

MAX_TOKENS = 4096
TEMPERATURE = 0.7
ATTACHMENT_PREVIEW = "Sent an attachment"


class ChatOrchestrator:
    """
    Оркестратор хода.

    Для вызывающего ход атомарен: либо возвращается ответ и в журнале
    появляется пара user/assistant, либо выбрасывается ChatRuntimeError
    и журнал не меняется. Обновление превью в каталоге выполняется по возможности (best effort).
    """

    def __init__(
        self,
        enrichment: EnrichmentCoordinator,
        assembler: PromptAssembler,
        generation: GenerationService,
        session_log: SessionLog,
        directory: SessionDirectory,
    ):
        self.enrichment = enrichment
        self.assembler = assembler
        self.generation = generation
        self.session_log = session_log
        self.directory = directory

    async def run_turn(self, turn: TurnInput) -> TurnResult:
        """
        Обработать один ход пользователя.

        Raises:
            TurnValidationError: нет ни текста, ни вложений
            GenerationError: модель не вернула ответ
            PersistenceError: не удалось сохранить ход в журнал
            TurnFailedError: любая другая ошибка
        """
        if not (turn.message or turn.image or turn.file):
            raise TurnValidationError(turn.session_id)

        try:
            reply = await self._run(turn)
        except ChatRuntimeError as e:
            logger.error(f"Turn for {turn.session_id} failed: [{e.error_code}] {e}")
            raise
        except Exception as e:
            logger.error(f"Unexpected error in turn for {turn.session_id}: {e}", exc_info=True)
            raise TurnFailedError(turn.session_id, reason=f"{type(e).__name__}: {e}") from e

        await self._refresh_preview(turn)
        return TurnResult(response=reply, session_id=turn.session_id)

    async def _run(self, turn: TurnInput) -> str:
        logger.info(
            f"Coordinating turn for {turn.session_id}: has_message={bool(turn.message)}, "
            f"has_image={bool(turn.image)}, file={turn.file_name or 'none'}"
        )
        bundle = await self.enrichment.enrich(
            turn.message,
            image=turn.image,
            file=turn.file,
            file_name=turn.file_name,
        )
        snapshot = await self.session_log.get_all(turn.session_id)
        messages = self.assembler.build(bundle, turn.message, snapshot.messages)
        user_turn = messages[-1].content

        logger.info(
            f"Generation request for {turn.session_id}: {len(messages)} messages, "
            f"image_context={len(bundle.image_context or '')}, file_context={len(bundle.file_context or '')}, "
            f"user_turn_length={len(user_turn)}"
        )
        reply = await self.generation.generate(messages, max_tokens=MAX_TOKENS, temperature=TEMPERATURE)
        if not reply or not reply.strip():
            raise GenerationError(reason="Empty completion")

        await self.session_log.append_exchange(turn.session_id, user_turn, reply)
        return reply

    async def _refresh_preview(self, turn: TurnInput) -> None:
        # История уже сохранена, устаревшее превью допустимо
        preview = turn.message or ATTACHMENT_PREVIEW
        try:
            await self.directory.update(turn.session_id, last_message_preview=preview)
        except ConversationNotFoundError:
            logger.warning(f"No directory entry for {turn.session_id}, preview not updated")
        except PersistenceError as e:
            logger.warning(f"Preview update for {turn.session_id} failed: {e}")
        except Exception as e:
            logger.warning(f"Unexpected error updating preview for {turn.session_id}: {e}", exc_info=True)
