"""Users Routes — REST surface over UserService.

Invariants:
    - Routes only translate HTTP ⇄ service calls; business rules live in UserService
    - Typed service errors propagate untouched to api/error_handlers.py
    - POST answers 200 with the created user, DELETE answers 204 with an empty body
    - GET /{id} adds _links.self and _links.users hrefs

Design Decisions:
    - get_user_service builds repository, transaction and service per request on the
      request's AsyncSession
    - Router prefix comes from settings so deployments can mount it elsewhere
    - Collection routes answer both /api/users and /api/users/ (no 307 redirect);
      the slash-less form is registered first so url_for("get_users") resolves to it
"""

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy.ext.asyncio import AsyncSession

from cmasapp.config import get_settings
from cmasapp.infrastructure.database import SqlAlchemyTransaction, get_db
from cmasapp.infrastructure.user_repository import SqlAlchemyUserRepository
from cmasapp.schemas.user import Link, UserDto, UserResource
from cmasapp.services.user_service import UserService

router = APIRouter(prefix=get_settings().api_prefix, tags=["users"])


def get_user_service(db: AsyncSession = Depends(get_db)) -> UserService:
    return UserService(SqlAlchemyUserRepository(db), SqlAlchemyTransaction(db))


@router.get("/", response_model=list[UserDto], include_in_schema=False)
@router.get("", response_model=list[UserDto])
async def get_users(service: UserService = Depends(get_user_service)):
    """List every stored user."""
    return await service.find_all_users()


@router.get("/{user_id}", response_model=UserResource)
async def get_user_by_id(
    user_id: int, request: Request,
    service: UserService = Depends(get_user_service),
):
    """Get one user with links to itself and the collection."""
    user = await service.find_user_by_id(user_id)
    return UserResource(
        **user.model_dump(),
        _links={
            "self": Link(href=str(request.url_for("get_user_by_id", user_id=user_id))),
            "users": Link(href=str(request.url_for("get_users"))),
        },
    )


@router.post(
    "/", response_model=UserDto, status_code=status.HTTP_200_OK, include_in_schema=False,
)
@router.post("", response_model=UserDto, status_code=status.HTTP_200_OK)
async def create_user(
    body: UserDto, service: UserService = Depends(get_user_service),
):
    """Create a user; the id in the body, if any, is ignored."""
    return await service.create_user(body)


@router.put("/{user_id}", response_model=UserDto)
async def update_user(
    user_id: int, body: UserDto,
    service: UserService = Depends(get_user_service),
):
    """Replace every field of an existing user except its id."""
    return await service.update_user(user_id, body)


@router.delete("/{user_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_user_by_id(
    user_id: int, service: UserService = Depends(get_user_service),
):
    """Delete a user permanently."""
    await service.delete_user_by_id(user_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
