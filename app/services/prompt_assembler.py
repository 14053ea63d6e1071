"""
PromptAssembler: builds the exact message list sent to generation.

Layout: one system message, at most 10 history messages in original
order, then the user turn. The result never exceeds 12 entries.
"""
from datetime import datetime, timezone
from email.utils import format_datetime
from typing import Callable, List, Optional, Sequence

from app.models.schemas import ChatMessage, EnrichmentBundle, Message

HISTORY_WINDOW = 10

SYSTEM_DIRECTIVE = (
    "You are a helpful AI assistant with access to file and image analysis capabilities. "
    "Current date and time: {now}.\n\n"
    "When users upload files or images, the content is automatically extracted and provided to you "
    "in the [FILE CONTENT] or [IMAGE ANALYSIS] sections. You CAN see and analyze this content directly. "
    "Respond based on the actual content provided, not as if you cannot access it."
)
GREETING = "Hello! How can I help you today?"
ANALYZE_UPLOAD = "Please analyze the {subject} I've uploaded and provide detailed insights."


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class PromptAssembler:
    """
    Deterministic prompt builder.

    The clock is injectable so the system message can be pinned in tests.
    """

    def __init__(self, clock: Callable[[], datetime] = _utc_now, history_window: int = HISTORY_WINDOW):
        self._clock = clock
        self._history_window = history_window

    def system_prompt(self, external_context: Optional[str] = None) -> str:
        prompt = SYSTEM_DIRECTIVE.format(now=format_datetime(self._clock(), usegmt=True))
        if external_context:
            prompt += f"\n\n{external_context}"
        return prompt

    @staticmethod
    def compose_user_turn(bundle: EnrichmentBundle, message: str) -> str:
        """
        Build the user turn from the raw message and attachment context.

        Without image/file context the raw message is used verbatim;
        otherwise labeled sections are emitted in a fixed order.
        """
        if not bundle.image_context and not bundle.file_context:
            return message or GREETING

        sections = []
        if bundle.image_context:
            sections.append(f"[IMAGE ANALYSIS]\n{bundle.image_context}\n\n")
        if bundle.file_context:
            sections.append(f"[FILE CONTENT]\n{bundle.file_context}\n\n")
        if message:
            sections.append(f"[USER'S QUESTION]\n{message}")
        else:
            subject = "image" if bundle.image_context else "file"
            sections.append(ANALYZE_UPLOAD.format(subject=subject))
        return "".join(sections)

    def build(
        self,
        bundle: EnrichmentBundle,
        message: str,
        history: Sequence[Message],
    ) -> List[ChatMessage]:
        """
        Assemble the generation request.

        Args:
            bundle: Enrichment output of this turn
            message: Raw user message
            history: Stored conversation (already bounded to 50)

        Returns:
            System message, recent history, user turn
        """
        recent = list(history)[-self._history_window:] if self._history_window else []
        return [
            ChatMessage(role="system", content=self.system_prompt(bundle.external_context)),
            *(ChatMessage(role=m.role, content=m.content) for m in recent),
            ChatMessage(role="user", content=self.compose_user_turn(bundle, message)),
        ]
