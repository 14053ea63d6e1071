"""
Сводка по сохранённым разговорам.

Собирает короткий текстовый обзор последних разговоров пользователя
(имя, дата, реплики с усечением) через публичные операции акторов.
"""

import logging

from app.services.session_directory import SessionDirectory
from app.services.session_log import SessionLog

logger = logging.getLogger("chat-runtime.conversation_digest")

DEFAULT_CHAT_LIMIT = 10
MESSAGE_PREVIEW_CHARS = 200


class ConversationDigest:
    def __init__(self, directory: SessionDirectory, session_log: SessionLog):
        self.directory = directory
        self.session_log = session_log

    async def build(self, limit: int = DEFAULT_CHAT_LIMIT) -> str:
        """
        Построить сводку по первым limit разговорам каталога.

        Args:
            limit: Максимальное число разговоров

        Returns:
            Текст сводки или пояснение, почему она пуста
        """
        summaries = await self.directory.list()
        if not summaries:
            return "You don't have any saved chats yet."

        blocks = []
        for summary in summaries[:limit]:
            snapshot = await self.session_log.get_all(summary.id)
            if not snapshot.messages:
                continue

            lines = [f'--- Chat: "{summary.name}" ({summary.updated_at.date().isoformat()}) ---']
            for message in snapshot.messages:
                speaker = "User" if message.role == "user" else "Assistant"
                content = message.content[:MESSAGE_PREVIEW_CHARS]
                if len(message.content) > MESSAGE_PREVIEW_CHARS:
                    content += "..."
                lines.append(f"{speaker}: {content}")
            blocks.append("\n".join(lines))

        if not blocks:
            return "Your chats don't contain any messages yet."

        logger.debug(f"Digest built from {len(blocks)} chats")
        return "Here's information from your saved chats:\n\n" + "\n\n".join(blocks)
