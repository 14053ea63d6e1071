"""
Тесты для ConversationDigest.
"""
import pytest

from app.services.conversation_digest import ConversationDigest
from app.services.session_directory import SessionDirectory
from app.services.session_log import SessionLog


@pytest.fixture
def services(store):
    directory = SessionDirectory(store)
    session_log = SessionLog(store)
    return directory, session_log, ConversationDigest(directory, session_log)


@pytest.mark.asyncio
async def test_no_chats(services):
    _, _, digest = services

    assert await digest.build() == "You don't have any saved chats yet."


@pytest.mark.asyncio
async def test_chats_without_messages(services):
    directory, _, digest = services
    await directory.create("s1")

    assert await digest.build() == "Your chats don't contain any messages yet."


@pytest.mark.asyncio
async def test_digest_lists_chats_and_truncates(services):
    directory, session_log, digest = services
    await directory.create("s1", "Trip")
    await directory.create("s2", "Empty")
    await session_log.append_exchange("s1", "Where to go?", "y" * 250)

    text = await digest.build()

    assert text.startswith("Here's information from your saved chats:\n\n")
    assert '--- Chat: "Trip" (' in text
    assert "User: Where to go?" in text
    assert "Assistant: " + "y" * 200 + "..." in text
    assert "y" * 201 not in text
    assert "Empty" not in text


@pytest.mark.asyncio
async def test_digest_respects_limit(services):
    directory, session_log, digest = services
    for i in range(3):
        await directory.create(f"s{i}", f"Chat {i}")
        await session_log.append("s" + str(i), "user", f"hello {i}")

    text = await digest.build(limit=2)

    assert "Chat 2" in text
    assert "Chat 1" in text
    assert "Chat 0" not in text
