"""Shared fixtures: an in-memory UserStore and an httpx client bound to the app."""

import os

import pytest
from httpx import ASGITransport, AsyncClient

# Never point tests at a real cluster
os.environ["MONGO_URI"] = ""
os.environ.pop("MONGODB_URI", None)

from config import Settings  # noqa: E402
from errors import StoreError  # noqa: E402
from main import create_app  # noqa: E402
from models import User  # noqa: E402


class FakeUserStore:
    """Dict-backed stand-in for MongoUserStore.

    `writes` counts mutations so tests can assert that no write happened.
    Set `fail_on` to an operation name to make it raise StoreError, or
    `crash_on` to make it raise an unexpected RuntimeError.
    """

    def __init__(self, connected: bool = True):
        self.connected = connected
        self.docs = []
        self.writes = 0
        self.fail_on = None
        self.crash_on = None
        self._next_id = 1

    def _check(self, operation: str):
        if self.fail_on == operation:
            raise StoreError(operation, "simulated failure")
        if self.crash_on == operation:
            raise RuntimeError(f"{operation} crashed")

    def _find(self, username):
        for doc in self.docs:
            if doc["username"] == username:
                return doc
        return None

    def add(self, username: str, password: str = "pw", scores: dict | None = None) -> dict:
        doc = {
            "_id": f"id{self._next_id}",
            "username": username,
            "password": password,
            "scores": dict(scores or {}),
        }
        self._next_id += 1
        self.docs.append(doc)
        return doc

    def is_connected(self) -> bool:
        return self.connected

    async def connect(self) -> bool:
        return self.connected

    async def close(self) -> None:
        pass

    async def find_user(self, username):
        self._check("find_user")
        doc = self._find(username)
        if doc is None:
            return None
        return User(id=doc["_id"], username=doc["username"],
                    password=doc["password"], scores=dict(doc["scores"]))

    async def create_user(self, username, password):
        self._check("create_user")
        doc = self.add(username, password)
        self.writes += 1
        return User(id=doc["_id"], username=username, password=password, scores={})

    async def raise_best_score(self, username, section, score):
        self._check("raise_best_score")
        doc = self._find(username)
        if doc is None:
            return None
        if score > doc["scores"].get(section, 0):
            doc["scores"][section] = score
            self.writes += 1
        return doc["scores"].get(section, 0)

    async def list_scores(self):
        self._check("list_scores")
        return [{"username": d["username"], "scores": dict(d["scores"])} for d in self.docs]


@pytest.fixture
def settings():
    return Settings(_env_file=None)


@pytest.fixture
def store():
    return FakeUserStore()


@pytest.fixture
def app(store, settings):
    return create_app(store=store, settings=settings)


@pytest.fixture
async def client(app):
    async with AsyncClient(
        transport=ASGITransport(app=app), base_url="http://test",
    ) as c:
        yield c
