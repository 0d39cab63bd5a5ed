"""Admin routes - User management, restricted to administrators."""

from fastapi import APIRouter, Depends, Query

from localiz.api.dependencies import get_admin_service, require_admin
from localiz.api.models import ErrorResponse, MessageResponse, PublicUser, RoleUpdateRequest, UserPage
from localiz.domain.accounts import AdminService
from localiz.domain.models import User

router = APIRouter(
    prefix="/admin",
    tags=["admin"],
    dependencies=[Depends(require_admin)],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)


def _public(user: User) -> PublicUser:
    return PublicUser.model_validate(user.public())


@router.get("/users", response_model=UserPage)
def list_users(
    page: int = Query(default=1),
    limit: int = Query(default=20),
    service: AdminService = Depends(get_admin_service),
) -> UserPage:
    """Accounts newest first; ``limit`` is clamped to 1..100."""
    result = service.list_users(page, limit)
    return UserPage(
        items=[_public(u) for u in result.items],
        total=result.total,
        page=result.page,
        pages=result.pages,
    )


@router.get("/users/{user_id}", response_model=PublicUser, responses={404: {"model": ErrorResponse}})
def get_user(user_id: str, service: AdminService = Depends(get_admin_service)) -> PublicUser:
    return _public(service.get_user(user_id))


@router.patch(
    "/users/{user_id}/role",
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def set_role(
    user_id: str,
    request_data: RoleUpdateRequest,
    service: AdminService = Depends(get_admin_service),
) -> dict:
    user = service.set_role(user_id, request_data.role)
    return {"message": "Role updated", "user": _public(user).model_dump(by_alias=True)}


@router.delete("/users/{user_id}", response_model=MessageResponse, responses={404: {"model": ErrorResponse}})
def delete_user(user_id: str, service: AdminService = Depends(get_admin_service)) -> MessageResponse:
    service.delete_user(user_id)
    return MessageResponse(message="User deleted")
