"""Aggregated project and conversation views over real storage."""

from datetime import timedelta

import pytest
from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncSession

from src.studio.core.db import SessionFactory
from src.studio.core.error_classifier import ErrorClassifier
from src.studio.core.errors import EntityNotFound, ErrorKind
from src.studio.models import EntityKind
from src.studio.services import Aggregator, DefensiveFetcher
from src.studio.services.aggregator import PROJECT_COLLECTIONS
from tests.factories import (
    ConversationFactory,
    MessageFactory,
    ProjectFactory,
    ProjectFileFactory,
    ProjectSettingFactory,
    generate_id,
    utc_now,
)
from tests.helpers import insert, logged

pytestmark = pytest.mark.integration


async def _broken_settings(session: AsyncSession, project_id):
    await session.execute(text("SELECT * FROM project_settings_v2"))
    return []


async def test_project_view_contains_all_collections(
    aggregator: Aggregator, db_session: AsyncSession
):
    now = utc_now()
    project = ProjectFactory.build()
    older = ConversationFactory.build(
        project_id=project.id, owner_id=project.owner_id, updated_at=now - timedelta(hours=1)
    )
    newer = ConversationFactory.build(project_id=project.id, owner_id=project.owner_id, updated_at=now)
    messages = [
        MessageFactory.build(conversation_id=older.id, created_at=now - timedelta(minutes=m))
        for m in (3, 2, 1)
    ]
    await insert(
        db_session,
        project,
        ProjectFileFactory.build(project_id=project.id),
        ProjectSettingFactory.build(project_id=project.id, key="theme", value="dark"),
        older,
        newer,
        *reversed(messages),
    )

    aggregate = await aggregator.project(project)

    assert not aggregate.degraded
    view = aggregate.data
    assert view.id == project.id
    assert [f.name for f in view.files] == ["popup.js"]
    assert [(s.key, s.value) for s in view.settings] == [("theme", "dark")]
    assert [c.id for c in view.conversations] == [newer.id, older.id]
    assert [m.id for m in view.conversations[1].messages] == [m.id for m in messages]
    assert view.conversations[0].messages == []


async def test_settings_failure_degrades_to_empty(
    session_factory: SessionFactory,
    classifier: ErrorClassifier,
    db_session: AsyncSession,
    capturing_logger,
):
    project = ProjectFactory.build()
    conversation = ConversationFactory.build(project_id=project.id, owner_id=project.owner_id)
    await insert(
        db_session,
        project,
        ProjectFileFactory.build(project_id=project.id),
        ProjectSettingFactory.build(project_id=project.id),
        conversation,
    )
    aggregator = Aggregator(
        session_factory,
        classifier,
        project_collections={**PROJECT_COLLECTIONS, "settings": _broken_settings},
    )

    aggregate = await aggregator.project(project)

    assert aggregate.degraded
    assert aggregate.data.settings == []
    assert len(aggregate.data.files) == 1
    assert [c.id for c in aggregate.data.conversations] == [conversation.id]
    assert [w.kind for w in aggregate.warnings] == [ErrorKind.STORAGE]

    warnings = logged(
        capturing_logger, "warning", "Dependent collection unavailable, using empty list"
    )
    assert [w["collection"] for w in warnings] == ["settings"]


async def test_conversation_view(aggregator: Aggregator, db_session: AsyncSession):
    project = ProjectFactory.build()
    conversation = ConversationFactory.build(project_id=project.id, owner_id=project.owner_id)
    first = MessageFactory.build(conversation_id=conversation.id, content="hi")
    second = MessageFactory.build(conversation_id=conversation.id, role="assistant", content="hello")
    await insert(db_session, project, conversation, first, second)

    aggregate = await aggregator.expand(EntityKind.CONVERSATION, conversation)

    assert [(m.role, m.content) for m in aggregate.data.messages] == [
        ("user", "hi"),
        ("assistant", "hello"),
    ]


async def test_duplicate_child_rows_are_collapsed(
    aggregator: Aggregator, db_session: AsyncSession
):
    project = ProjectFactory.build()
    file_id = generate_id()
    await insert(db_session, project)
    await insert(db_session, ProjectFileFactory.build(id=file_id, project_id=project.id, name="a.js"))
    await insert(db_session, ProjectFileFactory.build(id=file_id, project_id=project.id, name="b.js"))

    aggregate = await aggregator.project(project)

    assert [f.name for f in aggregate.data.files] == ["a.js"]


async def test_dependents_fetched_only_after_probe(
    fetcher: DefensiveFetcher,
    aggregator: Aggregator,
    query_counter,
):
    """A missing parent stops after the existence probe."""
    with pytest.raises(EntityNotFound):
        resolution = await fetcher.resolve(EntityKind.PROJECT, str(ProjectFactory.build().id))
        await aggregator.expand(EntityKind.PROJECT, resolution.entity)

    assert query_counter.count == 1
