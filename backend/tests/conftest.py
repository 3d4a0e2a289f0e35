"""Test fixtures: in-memory SQLite store, users, API and gateway clients."""
from __future__ import annotations

import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from catalog.auth import create_access_token
from catalog.client import CommentGateway, SessionContext, SpeciesGateway, create_client
from catalog.client.config import ClientSettings
from catalog.database import Base, get_db
from catalog.main import app
from catalog.models import Species, User

from tests.factories import make_species, make_user

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


app.dependency_overrides[get_db] = override_get_db


@pytest.fixture(autouse=True)
def schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client() -> TestClient:
    with TestClient(app) as c:
        yield c


@pytest.fixture
def alice(db_session) -> User:
    return make_user(db_session, "alice@catalog.io")


@pytest.fixture
def bob(db_session) -> User:
    return make_user(db_session, "bob@catalog.io")


@pytest.fixture
def guinea_pig(db_session, alice) -> Species:
    return make_species(db_session, alice)


class Session:
    """Gateways and context for one signed-in user talking to the app in-process."""

    def __init__(self, user: User | None):
        token = create_access_token(user) if user else None
        self.http = create_client(
            ClientSettings(api_base_url="http://testserver"),
            access_token=token,
            transport=httpx.ASGITransport(app=app),
        )
        self.species = SpeciesGateway(self.http)
        self.comments = CommentGateway(self.http)
        self.context = SessionContext(user.id if user else None)


@pytest_asyncio.fixture
async def alice_session(alice):
    session = Session(alice)
    yield session
    await session.http.aclose()


@pytest_asyncio.fixture
async def bob_session(bob):
    session = Session(bob)
    yield session
    await session.http.aclose()
