"""Contact routes - Public submission, admin inbox."""

from fastapi import APIRouter, Depends, Query, status

from localiz.api.dependencies import get_contact_service, require_admin
from localiz.api.models import (
    ContactCreatedResponse,
    ContactMessageResponse,
    ContactPage,
    ContactRequest,
    ErrorResponse,
    MessageResponse,
)
from localiz.domain.contact import ContactService

router = APIRouter(prefix="/contact", tags=["contact"])


@router.post(
    "",
    response_model=ContactCreatedResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}},
)
def submit_contact(
    request_data: ContactRequest,
    service: ContactService = Depends(get_contact_service),
) -> ContactCreatedResponse:
    """Store the message; support and the sender are emailed on a best-effort basis."""
    stored = service.submit(
        request_data.name, str(request_data.email), request_data.subject, request_data.message
    )
    return ContactCreatedResponse(ok=True, id=stored.id)


@router.get(
    "",
    response_model=ContactPage,
    dependencies=[Depends(require_admin)],
    responses={401: {"model": ErrorResponse}, 403: {"model": ErrorResponse}},
)
def list_contacts(
    page: int = Query(default=1),
    limit: int = Query(default=20),
    archived: bool | None = Query(default=None),
    service: ContactService = Depends(get_contact_service),
) -> ContactPage:
    result = service.list(page, limit, archived)
    return ContactPage(
        items=[ContactMessageResponse.from_domain(m) for m in result.items],
        total=result.total,
        page=result.page,
        pages=result.pages,
    )


@router.delete(
    "/{message_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
    summary="Archive a message",
)
def archive_contact(
    message_id: str, service: ContactService = Depends(get_contact_service)
) -> MessageResponse:
    service.archive(message_id)
    return MessageResponse(message="Message archived")


@router.patch(
    "/unarchive/{message_id}",
    response_model=MessageResponse,
    dependencies=[Depends(require_admin)],
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def unarchive_contact(
    message_id: str, service: ContactService = Depends(get_contact_service)
) -> MessageResponse:
    service.unarchive(message_id)
    return MessageResponse(message="Message restored")
