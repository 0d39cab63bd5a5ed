"""Listing routes - Public reads, authenticated writes by the owner or an admin."""

from fastapi import APIRouter, Depends, status

from localiz.api.dependencies import get_current_user, get_listing_service
from localiz.api.models import (
    ErrorResponse,
    ListingCreateRequest,
    ListingResponse,
    ListingUpdateRequest,
    MessageResponse,
)
from localiz.domain.marketplace import ListingService
from localiz.domain.models import User

router = APIRouter(prefix="/listings", tags=["listings"])


@router.get("", response_model=list[ListingResponse])
def list_listings(service: ListingService = Depends(get_listing_service)) -> list[ListingResponse]:
    return [ListingResponse.from_domain(item) for item in service.list()]


@router.get("/{listing_id}", response_model=ListingResponse, responses={404: {"model": ErrorResponse}})
def get_listing(listing_id: str, service: ListingService = Depends(get_listing_service)) -> ListingResponse:
    return ListingResponse.from_domain(service.get(listing_id))


@router.post(
    "",
    response_model=ListingResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
def create_listing(
    request_data: ListingCreateRequest,
    user: User = Depends(get_current_user),
    service: ListingService = Depends(get_listing_service),
) -> ListingResponse:
    return ListingResponse.from_domain(service.create(user, request_data.to_domain()))


@router.patch(
    "/{listing_id}",
    response_model=ListingResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def update_listing(
    listing_id: str,
    request_data: ListingUpdateRequest,
    user: User = Depends(get_current_user),
    service: ListingService = Depends(get_listing_service),
) -> ListingResponse:
    return ListingResponse.from_domain(service.update(user, listing_id, request_data.changes()))


@router.delete(
    "/{listing_id}",
    response_model=MessageResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def delete_listing(
    listing_id: str,
    user: User = Depends(get_current_user),
    service: ListingService = Depends(get_listing_service),
) -> MessageResponse:
    service.delete(user, listing_id)
    return MessageResponse(message="Listing deleted")
