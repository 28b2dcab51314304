"""Domain Types — the user record as the core layer sees it.

Invariants:
    - UserId wraps int — assigned by the store, never by callers
    - UserRecord mirrors the storage row field-for-field (no value transformation)
    - id is None only before the first save
    - Integer columns (id, age) hold signed 32-bit values; nothing outside
      INT32_MIN..INT32_MAX can be stored or looked up

Design Decisions:
    - NewType over wrapper classes: zero runtime cost, full type-checker support
    - Plain dataclass (not the ORM class) so core and tests never need a database
"""

from dataclasses import dataclass
from typing import NewType


UserId = NewType("UserId", int)

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1


def is_storable_id(user_id: int) -> bool:
    """True when user_id fits the integer primary key column."""
    return INT32_MIN <= user_id <= INT32_MAX


@dataclass
class UserRecord:
    """Persisted field set of a single user."""
    first_name: str
    last_name: str
    email: str
    age: int
    active: bool
    id: UserId | None = None
