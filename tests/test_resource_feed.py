import json
from typing import Generator

import pytest
from fastapi import status
from fastapi.testclient import TestClient
from fastapi.websockets import WebSocketDisconnect
from sqlalchemy import create_engine
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.orm import Session
from sqlalchemy.pool import AsyncAdaptedQueuePool

from restopos import main
from restopos.database.database import Base, get_db
from restopos.models.models import InterviewResource, User
from restopos.schemas.resource_schema import ResourceStream
from restopos.schemas.user_schema import UserRole
from restopos.services.realtime_service import RESOURCES_CHANNEL, manager
from tests.conftest import auth_headers


class LoopbackPublisher:
    """Delivers published resources straight to this process's feed."""

    async def publish(self, channel, message):
        await manager.distribute_message(json.loads(message))
        return 1


async def skip():
    return None


@pytest.fixture
def feed(tmp_path, monkeypatch) -> Generator[dict, None, None]:
    """
    An app client on a file database whose pool holds a single connection.
    """
    database = tmp_path / "feed.db"

    setup_engine = create_engine(f"sqlite:///{database}")
    Base.metadata.create_all(setup_engine)
    with Session(setup_engine, expire_on_commit=False) as session:
        user = User(
            email="waiter@restopos.io",
            full_name="Waiter",
            password="not-used",
            role=UserRole.WAITER,
        )
        session.add(user)
        session.flush()
        session.add(
            InterviewResource(
                title="Window functions",
                url="https://www.postgresql.org/docs/current/tutorial-window.html",
                stream=ResourceStream.SQL,
                added_by=user.id,
            )
        )
        session.commit()
    setup_engine.dispose()

    engine = create_async_engine(
        f"sqlite+aiosqlite:///{database}",
        poolclass=AsyncAdaptedQueuePool,
        pool_size=1,
        max_overflow=0,
        pool_timeout=2,
    )
    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)

    async def get_test_db():
        async with session_factory() as session:
            yield session

    monkeypatch.setattr(main, "create_tables", skip)
    monkeypatch.setattr(manager, "listen_for_messages", skip)
    monkeypatch.setattr(manager, "redis", LoopbackPublisher())
    monkeypatch.setattr(manager, "active_connections", [])
    monkeypatch.setattr(manager, "recent", [])
    main.app.dependency_overrides[get_db] = get_test_db

    with TestClient(main.app) as client:
        headers = auth_headers(user)
        yield {
            "client": client,
            "headers": headers,
            "token": headers["Authorization"].removeprefix("Bearer "),
        }
        client.portal.call(engine.dispose)

    main.app.dependency_overrides.clear()


def test_feed_rejects_bad_token(feed: dict):
    with pytest.raises(WebSocketDisconnect) as exc:
        with feed["client"].websocket_connect("/api/resources/ws?token=not-a-jwt"):
            pass

    assert exc.value.code == status.WS_1008_POLICY_VIOLATION


def test_feed_starts_with_saved_resources(feed: dict):
    with feed["client"].websocket_connect(
        f"/api/resources/ws?token={feed['token']}"
    ) as websocket:
        message = websocket.receive_json()

    assert message["event"] == "SNAPSHOT"
    assert [r["title"] for r in message["resources"]] == ["Window functions"]


def test_open_feed_leaves_the_pool_free(feed: dict):
    client = feed["client"]
    with client.websocket_connect(f"/api/resources/ws?token={feed['token']}") as websocket:
        assert websocket.receive_json()["event"] == "SNAPSHOT"

        response = client.get("/api/resources", headers=feed["headers"])
        assert response.status_code == status.HTTP_200_OK
        assert len(response.json()) == 1


def test_new_resource_reaches_open_feed(feed: dict):
    client = feed["client"]
    with client.websocket_connect(f"/api/resources/ws?token={feed['token']}") as websocket:
        websocket.receive_json()

        response = client.post(
            "/api/resources",
            json={
                "title": "Pivot tables",
                "url": "https://support.microsoft.com/excel",
                "stream": "Excel",
            },
            headers=feed["headers"],
        )
        assert response.status_code == status.HTTP_201_CREATED

        message = websocket.receive_json()

    assert message["event"] == "INSERT"
    assert message["table"] == RESOURCES_CHANNEL
    assert message["new"]["id"] == response.json()["id"]
    assert message["new"]["title"] == "Pivot tables"
