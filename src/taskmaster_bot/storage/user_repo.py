"""User lookups used for authorization and alert addressing."""

from __future__ import annotations

from typing import Optional

from taskmaster_bot.log import get_logger
from taskmaster_bot.storage.database import Database
from taskmaster_bot.storage.models import User

logger = get_logger(__name__)


class UserRepository:
    """Read access to users, plus insert for seeding."""

    def __init__(self, db: Database):
        self._db = db

    async def create(self, user: User) -> User:
        """Insert ``user``; an explicit ``user.id`` is kept, otherwise one is assigned."""
        cursor = await self._db.conn.execute(
            "INSERT INTO users (id, external_id, name, role) VALUES (?, ?, ?, ?)",
            (user.id, user.external_id, user.name, user.role),
        )
        await self._db.conn.commit()
        user.id = cursor.lastrowid
        logger.info("user_created", user_id=user.id, role=user.role)
        return user

    async def find_by_id(self, user_id: int) -> Optional[User]:
        cursor = await self._db.conn.execute("SELECT * FROM users WHERE id = ?", (user_id,))
        row = await cursor.fetchone()
        return self._row_to_user(row) if row else None

    async def find_by_external_id(self, external_id: str) -> Optional[User]:
        cursor = await self._db.conn.execute(
            "SELECT * FROM users WHERE external_id = ?", (str(external_id),)
        )
        row = await cursor.fetchone()
        return self._row_to_user(row) if row else None

    async def find_by_role(self, role: str) -> list[User]:
        """Users whose role matches ``role`` ignoring case and surrounding blanks."""
        cursor = await self._db.conn.execute(
            "SELECT * FROM users WHERE lower(trim(role)) = lower(trim(?)) ORDER BY id",
            (role,),
        )
        rows = await cursor.fetchall()
        return [self._row_to_user(row) for row in rows]

    @staticmethod
    def _row_to_user(row) -> User:
        return User(
            id=row["id"],
            external_id=row["external_id"],
            name=row["name"],
            role=row["role"],
        )
