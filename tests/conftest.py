"""
Pytest configuration and fixtures for Smart Inventory tests.

This file provides reusable test fixtures for database, API client, auth
tokens, fake LLM / POS clients and sample inventory.
"""

import os
import random

# Keep the app off the on-disk database while tests import it
os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("LLM_API_KEY", "")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from smart_inventory import auth, crud, schemas
from smart_inventory.agent.ai_client import AIResponse, LlmClient
from smart_inventory.constants import Role
from smart_inventory.context import build_context
from smart_inventory.database import get_db
from smart_inventory.main import app
from smart_inventory.middleware.rate_limit import limiter
from smart_inventory.models import Base
from smart_inventory.permissions import CurrentUser
from smart_inventory.services.pos_client import SimulatedPosClient


# Test database setup
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeLlmClient(LlmClient):
    """Records every message list and answers with a canned reply."""

    def __init__(self, reply: str = "Restock Absolut Vodka today.", error: Exception = None):
        self.reply = reply
        self.error = error
        self.calls = []

    async def complete(self, messages, max_tokens=None):
        self.calls.append({"messages": messages, "max_tokens": max_tokens})
        if self.error is not None:
            raise self.error
        return AIResponse(
            content=self.reply,
            model_used="fake-model",
            latency_ms=1,
            tokens_used=42,
            usage={"prompt_tokens": 30, "completion_tokens": 12, "total_tokens": 42},
        )


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database session for each test.
    """
    Base.metadata.create_all(bind=engine)
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def fake_llm():
    return FakeLlmClient()


@pytest.fixture
def app_context(db_session, fake_llm):
    """
    App context wired to the test database, the fake LLM and an instant,
    seeded POS simulator.
    """
    ctx = build_context(
        TestingSessionLocal,
        llm=fake_llm,
        pos=SimulatedPosClient(delay_seconds=0, rng=random.Random(7)),
    )
    yield ctx
    ctx.close()


@pytest.fixture(scope="function")
def client(db_session, app_context):
    """
    Create a test client with overridden database dependency.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.state.context = app_context
    limiter.enabled = False
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()
    app.state.context = None
    limiter.enabled = True


def _headers_for(db_session, email: str, role: Role) -> dict:
    user = CurrentUser(email=email, role=role, display_name=email.split("@")[0].title())
    session = auth.issue_token(db_session, user)
    return {"Authorization": f"Bearer {session.token}"}


@pytest.fixture
def admin_headers(db_session):
    return _headers_for(db_session, "admin@inventory.com", Role.ADMIN)


@pytest.fixture
def manager_headers(db_session):
    return _headers_for(db_session, "manager@inventory.com", Role.MANAGER)


@pytest.fixture
def staff_headers(db_session):
    return _headers_for(db_session, "staff@inventory.com", Role.STAFF)


@pytest.fixture
def sample_items(db_session, app_context):
    """
    The demo bar inventory, created through the store so the alert board
    sees every write.

    Statuses with category defaults:
        Absolut Vodka      Spirits   stock 1   high/2    -> urgent
        Jack Daniel's      Spirits   stock 5   high/2    -> optimal
        Cabernet Sauvignon Wines     stock 3   medium/3  -> normal
        Corona Beer        Beers     stock 10  medium/6  -> good
        Coca Cola          Soft Drinks stock 8 low/12    -> info
    """
    rows = [
        ("Absolut Vodka", "Spirits", 1),
        ("Jack Daniel's", "Spirits", 5),
        ("Cabernet Sauvignon", "Wines", 3),
        ("Corona Beer", "Beers", 10),
        ("Coca Cola", "Soft Drinks", 8),
    ]
    items = []
    for name, category, stock in rows:
        data = schemas.InventoryItemCreate(name=name, category=category, stock=stock)
        items.append(crud.create_item(db_session, data, actor="fixture", feed=app_context.feed))
    return {item.name: item for item in items}


@pytest.fixture
def urgent_item(sample_items):
    return sample_items["Absolut Vodka"]
