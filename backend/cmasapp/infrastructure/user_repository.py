"""User Repository — SQLAlchemy implementation of the UserRepository protocol.

Invariants:
    - Never commits: the caller's TransactionScope decides when writes become durable
    - save() inserts when id is unset or unknown, otherwise overwrites every column
    - find_by_id()/delete_by_id() treat unknown and out-of-range ids as absent
    - exists_by_email() is an exact, case-sensitive match (default string equality
      of both SQLite and PostgreSQL)

Design Decisions:
    - Returns UserRecord dataclasses, never ORM instances: callers cannot lazy-load or
      mutate tracked rows behind the session's back
    - flush() after writes so the generated id is visible before commit
    - Every statement runs under translate_store_errors(): driver failures surface as
      DatabaseError naming the operation and user
"""

import logging
from typing import Sequence

from sqlalchemy import delete, exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from cmasapp.core.domain_types import UserId, UserRecord, is_storable_id
from cmasapp.infrastructure.database import translate_store_errors
from cmasapp.models.user import User

logger = logging.getLogger(__name__)


def _to_record(row: User) -> UserRecord:
    return UserRecord(
        id=UserId(row.id),
        first_name=row.first_name,
        last_name=row.last_name,
        email=row.email,
        age=row.age,
        active=row.active,
    )


class SqlAlchemyUserRepository:
    """UserRepository backed by an AsyncSession."""

    def __init__(self, db: AsyncSession):
        self.db = db

    async def find_by_id(self, user_id: UserId) -> UserRecord | None:
        if not is_storable_id(user_id):
            return None
        with translate_store_errors("find", user_id):
            row = await self.db.get(User, user_id)
        return _to_record(row) if row else None

    async def find_all(self) -> Sequence[UserRecord]:
        with translate_store_errors("find_all"):
            result = await self.db.execute(select(User).order_by(User.id))
            rows = result.scalars().all()
        return [_to_record(row) for row in rows]

    async def save(self, user: UserRecord) -> UserRecord:
        with translate_store_errors("save", user.id):
            row = await self.db.get(User, user.id) if user.id is not None else None
            if row is None:
                row = User(id=user.id)
                self.db.add(row)
            row.first_name = user.first_name
            row.last_name = user.last_name
            row.email = user.email
            row.age = user.age
            row.active = user.active
            await self.db.flush()
            await self.db.refresh(row)
        return _to_record(row)

    async def delete_by_id(self, user_id: UserId) -> None:
        if not is_storable_id(user_id):
            return
        with translate_store_errors("delete", user_id):
            result = await self.db.execute(delete(User).where(User.id == user_id))
        if not result.rowcount:
            logger.debug(f"delete_by_id: no user {user_id}")

    async def exists_by_email(self, email: str) -> bool:
        with translate_store_errors("exists_by_email"):
            result = await self.db.execute(
                select(exists().where(User.email == email)),
            )
            return bool(result.scalar())
