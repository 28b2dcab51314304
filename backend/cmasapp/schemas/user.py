"""User Schemas — Pydantic wire representation for the users API.

Invariants:
    - Wire names are camelCase (firstName, lastName), Python attributes snake_case
    - firstName, lastName, email: non-empty strings; age: 32-bit int; active: bool
    - id is optional on input and ignored by create; always set on output
    - Malformed payloads fail here (RequestValidationError), never in the service

Design Decisions:
    - alias_generator=to_camel + populate_by_name: one model serves requests and responses
    - Links as plain href strings instead of a hypermedia framework
"""

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from cmasapp.core.domain_types import INT32_MAX, INT32_MIN


class UserDto(BaseModel):
    """User as exchanged with API clients."""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: int | None = None
    first_name: str = Field(min_length=1, max_length=255)
    last_name: str = Field(min_length=1, max_length=255)
    email: str = Field(min_length=1, max_length=255)
    age: int = Field(ge=INT32_MIN, le=INT32_MAX)
    active: bool


class Link(BaseModel):
    href: str


class UserResource(UserDto):
    """Single-user response with links to itself and to the collection."""
    links: dict[str, Link] = Field(default_factory=dict, alias="_links")
