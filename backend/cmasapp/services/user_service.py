"""User Service — business rules for creating, reading, updating and deleting users.

Invariants:
    - No two stored users share an email (checked before every write that sets one)
    - id is assigned by the store on create and never changed afterwards
    - Update replaces every mutable field (full replacement, not a merge)
    - Each mutating operation is one transaction: commit on success, rollback on any failure
    - Failures are typed (UserNotFoundError, EmailTakenError); HTTP mapping happens in api/

Design Decisions:
    - Depends on UserRepository + TransactionScope protocols only: unit tests use fakes,
      no database required
    - Email check is check-then-act; concurrent creates with one email may both pass
      (accepted — no unique constraint, see models/user.py)
    - Update re-checks uniqueness only when the email actually changes, so re-sending
      a user's own email is never rejected
    - Ids outside the 32-bit key range are NotFound without a store round-trip
"""

import logging
from typing import Sequence

from cmasapp.core.domain_types import UserId, UserRecord, is_storable_id
from cmasapp.core.errors import EmailTakenError, UserNotFoundError
from cmasapp.core.repository_protocols import TransactionScope, UserRepository
from cmasapp.schemas.user import UserDto

logger = logging.getLogger(__name__)


class UserService:
    """Create, update, search and delete users.

    Converts between the wire representation (UserDto) and the storage
    representation (UserRecord) on the way in and out.
    """

    def __init__(self, repository: UserRepository, transaction: TransactionScope):
        self.repository = repository
        self.transaction = transaction

    async def create_user(self, user_dto: UserDto) -> UserDto:
        """Store a new user; any client-supplied id is discarded.

        Raises:
            EmailTakenError: the email already belongs to a stored user.
        """
        user = _to_record(user_dto)
        user.id = None
        try:
            if await self.repository.exists_by_email(user.email):
                raise EmailTakenError(user.email, operation="create")
            saved = await self.repository.save(user)
            await self.transaction.commit()
        except Exception:
            await self.transaction.rollback()
            raise
        logger.info(f"Created user {saved.id}", extra={"user_id": saved.id, "operation": "create"})
        return _to_dto(saved)

    async def find_all_users(self) -> list[UserDto]:
        users: Sequence[UserRecord] = await self.repository.find_all()
        return [_to_dto(user) for user in users]

    async def find_user_by_id(self, user_id: int) -> UserDto:
        """Raises UserNotFoundError when no user has this id."""
        return _to_dto(await self._find_or_raise(user_id, "find"))

    async def update_user(self, user_id: int, updated: UserDto) -> UserDto:
        """Replace every field except id.

        Raises:
            UserNotFoundError: no user has this id.
            EmailTakenError: the new email belongs to another user.
        """
        try:
            user = await self._find_or_raise(user_id, "update")
            params = _to_record(updated)
            if params.email != user.email and await self.repository.exists_by_email(params.email):
                raise EmailTakenError(params.email, user_id, "update")

            user.first_name = params.first_name
            user.last_name = params.last_name
            user.email = params.email
            user.age = params.age
            user.active = params.active

            saved = await self.repository.save(user)
            await self.transaction.commit()
        except Exception:
            await self.transaction.rollback()
            raise
        logger.info(f"Updated user {user_id}", extra={"user_id": user_id, "operation": "update"})
        return _to_dto(saved)

    async def delete_user_by_id(self, user_id: int) -> None:
        """Raises UserNotFoundError when no user has this id."""
        try:
            await self._find_or_raise(user_id, "delete")
            await self.repository.delete_by_id(UserId(user_id))
            await self.transaction.commit()
        except Exception:
            await self.transaction.rollback()
            raise
        logger.info(f"Deleted user {user_id}", extra={"user_id": user_id, "operation": "delete"})

    async def _find_or_raise(self, user_id: int, operation: str) -> UserRecord:
        # ids outside the key column range cannot exist in the store
        user = (
            await self.repository.find_by_id(UserId(user_id))
            if is_storable_id(user_id) else None
        )
        if user is None:
            logger.warning(
                f"User {user_id} not found",
                extra={"user_id": user_id, "operation": operation},
            )
            raise UserNotFoundError(user_id, operation)
        return user


def _to_record(user_dto: UserDto) -> UserRecord:
    return UserRecord(
        id=UserId(user_dto.id) if user_dto.id is not None else None,
        first_name=user_dto.first_name,
        last_name=user_dto.last_name,
        email=user_dto.email,
        age=user_dto.age,
        active=user_dto.active,
    )


def _to_dto(user: UserRecord) -> UserDto:
    return UserDto(
        id=user.id,
        first_name=user.first_name,
        last_name=user.last_name,
        email=user.email,
        age=user.age,
        active=user.active,
    )
