"""
Unit тесты для SessionDirectory.
"""
import re

import pytest

from app.core.errors import ConversationNotFoundError, PersistenceError
from app.services.session_directory import (
    DIRECTORY_KEY,
    NAMESPACE,
    SUMMARIES_RECORD,
    SessionDirectory,
    generate_conversation_id,
)


@pytest.fixture
def directory(store):
    return SessionDirectory(store)


def test_generated_id_format():
    assert re.fullmatch(r"session-[0-9a-f]{9}", generate_conversation_id())


@pytest.mark.asyncio
async def test_create_defaults(directory):
    summary = await directory.create()

    assert summary.id.startswith("session-")
    assert summary.name == "New Chat"
    assert summary.last_message_preview == ""
    assert summary.created_at == summary.updated_at


@pytest.mark.asyncio
async def test_create_puts_newest_first(directory):
    await directory.create("s1", "First")
    await directory.create("s2", "Second")
    await directory.create("s3", "Third")

    assert [s.id for s in await directory.list()] == ["s3", "s2", "s1"]


@pytest.mark.asyncio
async def test_update_keeps_position_and_id(directory):
    await directory.create("s1", "First")
    await directory.create("s2", "Second")
    before = await directory.get("s1")

    updated = await directory.update("s1", name="Renamed")

    summaries = await directory.list()
    assert [s.id for s in summaries] == ["s2", "s1"]
    assert updated.name == "Renamed"
    assert updated.created_at == before.created_at
    assert updated.updated_at >= before.updated_at
    assert updated.last_message_preview == before.last_message_preview


@pytest.mark.asyncio
async def test_update_preview_without_name(directory):
    await directory.create("s1", "Trip")

    updated = await directory.update("s1", last_message_preview="Hello")

    assert updated.name == "Trip"
    assert updated.last_message_preview == "Hello"


@pytest.mark.asyncio
async def test_update_ignores_empty_name(directory):
    await directory.create("s1", "Trip")

    updated = await directory.update("s1", name="")

    assert updated.name == "Trip"


@pytest.mark.asyncio
async def test_update_unknown_raises_not_found(directory):
    await directory.create("s1")

    with pytest.raises(ConversationNotFoundError) as exc_info:
        await directory.update("missing", name="x")

    assert exc_info.value.error_code == "NOT_FOUND"
    assert [s.id for s in await directory.list()] == ["s1"]


@pytest.mark.asyncio
async def test_remove(directory):
    await directory.create("s1")
    await directory.create("s2")

    await directory.remove("s1")
    await directory.remove("not-there")

    assert [s.id for s in await directory.list()] == ["s2"]
    assert await directory.get("s1") is None


@pytest.mark.asyncio
async def test_list_returns_copies(directory):
    await directory.create("s1", "Original")

    listed = await directory.list()
    listed[0].name = "Mutated"

    assert (await directory.get("s1")).name == "Original"


@pytest.mark.asyncio
async def test_persisted_and_hydrated(store):
    writer = SessionDirectory(store)
    await writer.create("s1", "First")
    await writer.create("s2", "Second")

    stored = store.records[(NAMESPACE, DIRECTORY_KEY, SUMMARIES_RECORD)]
    assert [s["id"] for s in stored] == ["s2", "s1"]

    reader = SessionDirectory(store)
    assert [s.name for s in await reader.list()] == ["Second", "First"]


@pytest.mark.asyncio
async def test_failed_persist_leaves_directory_unchanged(directory, store):
    await directory.create("s1")
    store.fail_on.add("save")

    with pytest.raises(PersistenceError):
        await directory.create("s2")
    with pytest.raises(PersistenceError):
        await directory.update("s1", name="New name")

    store.fail_on.clear()
    summaries = await directory.list()
    assert [s.id for s in summaries] == ["s1"]
    assert summaries[0].name == "New Chat"


@pytest.mark.asyncio
async def test_corrupt_record_raises_persistence_error(store):
    store.records[(NAMESPACE, DIRECTORY_KEY, SUMMARIES_RECORD)] = [{"id": "s1"}, {"bogus": 1}]
    directory = SessionDirectory(store)

    with pytest.raises(PersistenceError) as exc_info:
        await directory.list()

    assert exc_info.value.details["record"] == SUMMARIES_RECORD
