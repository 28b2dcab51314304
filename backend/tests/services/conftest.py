"""Service test fixtures — in-memory UserRepository and TransactionScope fakes.

Invariants:
    - FakeUserRepository honours the UserRepository protocol contract exactly
      (ids assigned from 100000 upward, absence is None, deletes of unknown ids are no-ops)
    - Writes are staged and only become visible in `committed` after commit()

Design Decisions:
    - Hand-written fakes over mocks: tests assert on resulting state, not on call order
"""

from dataclasses import replace

import pytest

from cmasapp.core.domain_types import UserId, UserRecord
from cmasapp.services.user_service import UserService

FIRST_ID = 100000


class FakeUserRepository:
    def __init__(self):
        self.rows: dict[int, UserRecord] = {}
        self.committed: dict[int, UserRecord] = {}
        self._next_id = FIRST_ID
        self.saved: list[UserRecord] = []
        self.deleted: list[int] = []

    async def find_by_id(self, user_id):
        row = self.rows.get(user_id)
        return replace(row) if row else None

    async def find_all(self):
        return [replace(row) for row in self.rows.values()]

    async def save(self, user):
        if user.id is None or user.id not in self.rows:
            user = replace(user, id=user.id if user.id is not None else UserId(self._next_id))
            self._next_id = max(self._next_id, user.id + 1)
        self.rows[user.id] = replace(user)
        self.saved.append(replace(user))
        return replace(user)

    async def delete_by_id(self, user_id):
        self.rows.pop(user_id, None)
        self.deleted.append(user_id)

    async def exists_by_email(self, email):
        return any(row.email == email for row in self.rows.values())


class FakeTransaction:
    def __init__(self, repository: FakeUserRepository):
        self.repository = repository
        self.commits = 0
        self.rollbacks = 0

    async def commit(self):
        self.commits += 1
        self.repository.committed = {k: replace(v) for k, v in self.repository.rows.items()}

    async def rollback(self):
        self.rollbacks += 1
        self.repository.rows = {k: replace(v) for k, v in self.repository.committed.items()}


@pytest.fixture
def repository():
    return FakeUserRepository()


@pytest.fixture
def transaction(repository):
    return FakeTransaction(repository)


@pytest.fixture
def service(repository, transaction):
    return UserService(repository, transaction)


@pytest.fixture
async def stored_users(repository, transaction):
    """Mark (100000) and Lucius (100001), committed."""
    await repository.save(UserRecord("Mark", "Avrelly", "ma@gmail.com", 15, True))
    await repository.save(UserRecord("Lucius", "Verus", "lv@gmail.com", 18, True))
    await transaction.commit()
    transaction.commits = 0
    return repository
