"""User ORM — the single persisted entity.

Invariants:
    - id is an integer primary key assigned by the database on insert
    - first_name, last_name, email are non-nullable strings (255 max)
    - email is indexed for the uniqueness lookup; uniqueness itself is a service rule

Design Decisions:
    - No unique constraint on email: the service owns the rule and its error message,
      a constraint violation would surface as a generic DatabaseError instead
"""

from sqlalchemy import Boolean, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from cmasapp.db.base import Base


class User(Base):
    """Stored user row."""
    __tablename__ = "users"

    id: Mapped[int] = mapped_column(
        Integer, primary_key=True, autoincrement=True,
    )
    first_name: Mapped[str] = mapped_column(String(255), nullable=False)
    last_name: Mapped[str] = mapped_column(String(255), nullable=False)
    email: Mapped[str] = mapped_column(
        String(255), nullable=False, index=True,
    )
    age: Mapped[int] = mapped_column(Integer, nullable=False)
    active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, default=True,
    )
