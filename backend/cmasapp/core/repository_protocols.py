"""Boundary Protocols — contracts between the user service and the store.

Invariants:
    - Core NEVER imports from infrastructure — dependency arrows point inward only
    - Store access goes through UserRepository (five operations, nothing more)
    - Absence is a value: find_by_id returns None, delete_by_id ignores unknown ids

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - TransactionScope is the commit/rollback half of AsyncSession, so the service
      owns the all-or-nothing boundary without importing SQLAlchemy
"""

from typing import Protocol, Sequence

from cmasapp.core.domain_types import UserId, UserRecord


class UserRepository(Protocol):
    """Contract for user persistence — implemented by infrastructure."""
    async def find_by_id(self, user_id: UserId) -> UserRecord | None: ...
    async def find_all(self) -> Sequence[UserRecord]: ...
    async def save(self, user: UserRecord) -> UserRecord: ...
    async def delete_by_id(self, user_id: UserId) -> None: ...
    async def exists_by_email(self, email: str) -> bool: ...


class TransactionScope(Protocol):
    """Unit-of-work boundary for a single service operation."""
    async def commit(self) -> None: ...
    async def rollback(self) -> None: ...
