import logging

from database import UserStore
from errors import InvalidPasswordError
from models import User

logger = logging.getLogger(__name__)


async def login_or_signup(store: UserStore, username: str, password: str) -> User:
    """Return the user for these credentials, creating the account on first login."""
    user = await store.find_user(username)
    if user is None:
        user = await store.create_user(username, password)
        logger.info("Created user on first login", extra={"username": username})

    # Plaintext comparison
    if user.password != password:
        raise InvalidPasswordError(username)
    return user
