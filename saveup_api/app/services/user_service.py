"""
Business logic for user accounts.

``UserService`` wraps the store's user helpers with the rules the API
enforces on top of them: unique e-mail addresses and usernames, login
returning a signed token and partial profile updates that re-hash a
new password.  User records leaving this service never contain the
password hash.
"""

import logging
from typing import Any, Dict, Mapping, Optional

from ..core.errors import InvalidCredentialError, NotFoundError, ValidationError
from ..core.security import create_access_token, hash_password
from ..schemas.auth import Principal
from ..store import ResourceStore, sanitize_user

logger = logging.getLogger(__name__)


class UserService:
    """Registration, login and profile updates."""

    def __init__(self, store: ResourceStore):
        self.store = store

    async def register(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Create a new account.

        Rejects a duplicate e-mail address or username with a
        ``ValidationError`` before anything is written.
        """
        email = data.get("email")
        username = data.get("username")
        logger.info("Registering user %s", email)
        if email and self.store.get_user_by_email(email) is not None:
            raise ValidationError("Email already registered")
        if username and self.store.find_one("users", {"username": username}) is not None:
            raise ValidationError("Username already taken")
        user = self.store.create_user(data)
        logger.info("Registered user %s with id %s", email, user["id"])
        return user

    async def authenticate(self, email: str, password: str) -> Optional[Dict[str, Any]]:
        """Return the sanitised user if ``email``/``password`` match, else ``None``."""
        user = self.store.get_user_by_email(email)
        if user is None or not self.store.verify_user_password(user, password):
            return None
        return sanitize_user(user)

    async def login(self, data: Mapping[str, Any]) -> Dict[str, Any]:
        """Check credentials and issue a token.

        Returns
        -------
        dict
            ``{"user": <sanitised user>, "token": <bearer token>}``
        """
        email = data.get("email")
        password = data.get("password")
        if not email or not password:
            raise ValidationError("Email and password are required")
        user = await self.authenticate(email, password)
        if user is None:
            logger.warning("Failed login attempt for %s", email)
            raise InvalidCredentialError("Invalid credentials")
        logger.info("User %s logged in", user["id"])
        token = create_access_token(Principal.from_user(user))
        return {"user": user, "token": token}

    async def get_user(self, user_id: int) -> Dict[str, Any]:
        user = self.store.get("users", user_id)
        if user is None:
            raise NotFoundError("User not found")
        return sanitize_user(user)

    async def update_user(self, user_id: int, updates: Mapping[str, Any]) -> Dict[str, Any]:
        """Apply a partial profile update.

        ``id`` and ``passwordHash`` are never taken from the payload; a
        ``password`` key is hashed into a new ``passwordHash``.
        """
        values = {key: value for key, value in updates.items() if key not in {"id", "passwordHash", "password"}}
        for unique_field, message in (("email", "Email already registered"), ("username", "Username already taken")):
            if values.get(unique_field):
                other = self.store.find_one("users", {unique_field: values[unique_field]})
                if other is not None and other["id"] != user_id:
                    raise ValidationError(message)
        if updates.get("password"):
            values["passwordHash"] = hash_password(str(updates["password"]))
        user = self.store.update("users", user_id, values)
        if user is None:
            raise NotFoundError("User not found")
        return sanitize_user(user)
