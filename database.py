"""
User persistence on MongoDB via motor.

The app talks to a `UserStore`; `MongoUserStore` is the production one. Its
`is_connected()` is what the readiness gate and /health consult. Readiness
follows the driver's topology events, so it drops when the primary is lost
and comes back once the driver reconnects.
"""
import logging
from contextlib import contextmanager
from typing import Dict, List, Optional, Protocol

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ReturnDocument, monitoring
from pymongo.errors import PyMongoError

from errors import StoreError
from models import User

logger = logging.getLogger(__name__)


class UserStore(Protocol):
    def is_connected(self) -> bool: ...
    async def connect(self) -> bool: ...
    async def close(self) -> None: ...
    async def find_user(self, username: str) -> Optional[User]: ...
    async def create_user(self, username: str, password: str) -> User: ...
    async def raise_best_score(self, username: str, section: str, score: int) -> Optional[int]: ...
    async def list_scores(self) -> List[Dict]: ...


class _ReadinessListener(monitoring.TopologyListener):
    def __init__(self):
        self.writable = False

    def opened(self, event):
        pass

    def description_changed(self, event):
        self.writable = event.new_description.has_writable_server()

    def closed(self, event):
        self.writable = False


def _to_user(doc: dict) -> User:
    scores = doc.get("scores") or {}
    return User(
        id=str(doc["_id"]),
        username=doc["username"],
        password=doc.get("password"),
        scores={
            k: v for k, v in scores.items()
            if isinstance(v, (int, float)) and not isinstance(v, bool)
        },
    )


@contextmanager
def _store_errors(operation: str):
    try:
        yield
    except PyMongoError as e:
        logger.error(f"MongoDB {operation} failed: {e}", extra={"error_code": StoreError.code})
        raise StoreError(operation, str(e)) from e


class MongoUserStore:
    def __init__(
        self,
        uri: Optional[str],
        db_name: str = "quizapp",
        timeout_ms: int = 5000,
        client: Optional[AsyncIOMotorClient] = None,
    ):
        self._uri = uri
        self._db_name = db_name
        self._timeout_ms = timeout_ms
        self._client = client
        self._listener = _ReadinessListener()
        self._ready = False

    @property
    def users(self):
        return self._client[self._db_name].users

    def is_connected(self) -> bool:
        return self._ready and self._listener.writable

    async def connect(self) -> bool:
        """Single connection attempt; failure leaves the store disconnected."""
        if not self._uri:
            logger.warning("MONGO_URI is not set; /api routes will answer 503")
            return False
        try:
            self._client = AsyncIOMotorClient(
                self._uri,
                serverSelectionTimeoutMS=self._timeout_ms,
                event_listeners=[self._listener],
            )
            await self._client.admin.command("ping")
        except PyMongoError as e:
            logger.error(f"MongoDB connection error: {e}")
            if self._client is not None:
                self._client.close()
                self._client = None
            return False
        self._ready = True
        logger.info(f"MongoDB connected (db={self._db_name})")
        return True

    async def close(self) -> None:
        if self._client is not None:
            self._client.close()
        self._ready = False

    async def find_user(self, username: str) -> Optional[User]:
        with _store_errors("find_user"):
            doc = await self.users.find_one({"username": username})
        return _to_user(doc) if doc else None

    async def create_user(self, username: str, password: str) -> User:
        doc = {"username": username, "password": password, "scores": {}}
        with _store_errors("create_user"):
            result = await self.users.insert_one(doc)
        doc["_id"] = result.inserted_id
        return _to_user(doc)

    async def raise_best_score(self, username: str, section: str, score: int) -> Optional[int]:
        """Keep the per-section maximum; returns the best after the update, None for unknown users."""
        key = f"scores.{section}"
        with _store_errors("raise_best_score"):
            if score > 0:
                # $max leaves the document untouched unless score is strictly greater
                doc = await self.users.find_one_and_update(
                    {"username": username},
                    {"$max": {key: score}},
                    projection={"scores": 1},
                    return_document=ReturnDocument.AFTER,
                )
            else:
                doc = await self.users.find_one({"username": username}, {"scores": 1})
        if doc is None:
            return None
        return (doc.get("scores") or {}).get(section) or 0

    async def list_scores(self) -> List[Dict]:
        rows = []
        with _store_errors("list_scores"):
            async for doc in self.users.find({}, {"_id": 0, "username": 1, "scores": 1}):
                rows.append(doc)
        return rows
