"""Tests for the in-process entity cache and its two-phase optimistic entries."""

from uuid import uuid4

import pytest

from src.studio.models import EntityKind
from src.studio.services import EntityCache, EntryState

pytestmark = pytest.mark.unit


def test_get_miss_then_hit(cache: EntityCache):
    entity_id = uuid4()
    value = {"name": "Demo"}

    assert cache.get(EntityKind.PROJECT, entity_id) is None
    cache.put(EntityKind.PROJECT, entity_id, value)

    assert cache.get(EntityKind.PROJECT, entity_id) is value
    assert (cache.hits, cache.misses) == (1, 1)


def test_keys_include_kind(cache: EntityCache):
    entity_id = uuid4()
    cache.put(EntityKind.PROJECT, entity_id, "project")

    assert cache.get(EntityKind.CONVERSATION, entity_id) is None
    assert (EntityKind.PROJECT, entity_id) in cache


def test_invalidate(cache: EntityCache):
    entity_id = uuid4()
    cache.put(EntityKind.FILE, entity_id, "file")

    assert cache.invalidate(EntityKind.FILE, entity_id) is True
    assert cache.invalidate(EntityKind.FILE, entity_id) is False
    assert cache.get(EntityKind.FILE, entity_id) is None


def test_pending_entry_is_not_served(cache: EntityCache):
    entity_id = uuid4()
    cache.register_pending(EntityKind.CONVERSATION, entity_id, "placeholder")

    assert cache.get(EntityKind.CONVERSATION, entity_id) is None
    entry = cache.peek(EntityKind.CONVERSATION, entity_id)
    assert entry is not None
    assert entry.state == EntryState.PENDING
    assert entry.value == "placeholder"


def test_confirm_replaces_placeholder_in_place(cache: EntityCache):
    entity_id = uuid4()
    cache.register_pending(EntityKind.MESSAGE, entity_id, "placeholder")
    entry = cache.peek(EntityKind.MESSAGE, entity_id)

    cache.confirm(EntityKind.MESSAGE, entity_id, "stored")

    assert cache.peek(EntityKind.MESSAGE, entity_id) is entry
    assert entry.state == EntryState.CONFIRMED
    assert cache.get(EntityKind.MESSAGE, entity_id) == "stored"


def test_confirm_without_placeholder_inserts(cache: EntityCache):
    entity_id = uuid4()
    cache.confirm(EntityKind.PROJECT, entity_id, "stored")
    assert cache.get(EntityKind.PROJECT, entity_id) == "stored"


def test_discard_pending_rolls_back(cache: EntityCache):
    entity_id = uuid4()
    cache.register_pending(EntityKind.PROJECT, entity_id, "placeholder")

    assert cache.discard_pending(EntityKind.PROJECT, entity_id) is True
    assert cache.peek(EntityKind.PROJECT, entity_id) is None
    assert len(cache) == 0


def test_discard_pending_keeps_confirmed(cache: EntityCache):
    entity_id = uuid4()
    cache.put(EntityKind.PROJECT, entity_id, "stored")

    assert cache.discard_pending(EntityKind.PROJECT, entity_id) is False
    assert cache.get(EntityKind.PROJECT, entity_id) == "stored"


def test_clear(cache: EntityCache):
    cache.put(EntityKind.PROJECT, uuid4(), "a")
    cache.register_pending(EntityKind.PROJECT, uuid4(), "b")
    cache.clear()
    assert len(cache) == 0
