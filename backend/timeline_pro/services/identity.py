"""
Identity service: anonymous and custom-token sign-in backed by the users table.
"""

import secrets
from datetime import datetime, timezone
from uuid import uuid4

import aiosqlite

from timeline_pro.database.db import connect
from timeline_pro.errors import AuthError
from timeline_pro.logging import get_logger
from timeline_pro.models import UserIdentity

logger = get_logger('services.identity')


def _now() -> str:
    return datetime.now(timezone.utc).isoformat()


def _row_to_identity(row: dict) -> UserIdentity:
    return UserIdentity(
        uid=row["uid"],
        is_anonymous=bool(row["is_anonymous"]),
        token=row["token"],
        created_at=row["created_at"],
    )


class IdentityService:
    """Issues bearer tokens and resolves them back to users."""

    def __init__(self, db_path: str, initial_auth_token: str | None = None):
        self.db_path = db_path
        self.initial_auth_token = initial_auth_token

    async def _get_db(self) -> aiosqlite.Connection:
        return await connect(self.db_path)

    async def _insert_user(
        self,
        db: aiosqlite.Connection,
        is_anonymous: bool,
        custom_token: str | None = None,
    ) -> UserIdentity:
        identity = UserIdentity(
            uid=uuid4().hex,
            is_anonymous=is_anonymous,
            token=secrets.token_urlsafe(32),
            created_at=_now(),
        )
        await db.execute(
            """INSERT INTO users (uid, token, is_anonymous, custom_token, created_at)
               VALUES (?, ?, ?, ?, ?)""",
            (identity.uid, identity.token, int(is_anonymous), custom_token,
             identity.created_at.isoformat()),
        )
        await db.commit()
        return identity

    async def sign_in_anonymously(self) -> UserIdentity:
        db = await self._get_db()
        try:
            identity = await self._insert_user(db, is_anonymous=True)
        finally:
            await db.close()
        logger.info(f"Anonymous sign-in: {identity.uid[:8]}")
        return identity

    async def sign_in_with_custom_token(self, token: str) -> UserIdentity:
        """
        Sign in with a provisioned custom token.

        The same token always maps to the same user.

        :raises AuthError: If the token was not provisioned
        """
        if not self.initial_auth_token or not secrets.compare_digest(token, self.initial_auth_token):
            raise AuthError("Database restricted.")

        db = await self._get_db()
        try:
            cursor = await db.execute("SELECT * FROM users WHERE custom_token = ?", (token,))
            row = await cursor.fetchone()
            if row:
                return _row_to_identity(dict(row))
            identity = await self._insert_user(db, is_anonymous=False, custom_token=token)
        finally:
            await db.close()
        logger.info(f"Custom token sign-in: {identity.uid[:8]}")
        return identity

    async def resolve(self, token: str) -> UserIdentity | None:
        if not token:
            return None
        db = await self._get_db()
        try:
            cursor = await db.execute("SELECT * FROM users WHERE token = ?", (token,))
            row = await cursor.fetchone()
            return _row_to_identity(dict(row)) if row else None
        finally:
            await db.close()
