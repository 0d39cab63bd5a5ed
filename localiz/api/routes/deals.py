"""Deal routes - Public reads, authenticated writes by the author or an admin."""

from fastapi import APIRouter, Depends, status

from localiz.api.dependencies import get_current_user, get_deal_service
from localiz.api.models import (
    DealCreateRequest,
    DealResponse,
    DealUpdateRequest,
    ErrorResponse,
    MessageResponse,
)
from localiz.domain.marketplace import DealService
from localiz.domain.models import User

router = APIRouter(prefix="/deals", tags=["deals"])


@router.get("", response_model=list[DealResponse])
def list_deals(service: DealService = Depends(get_deal_service)) -> list[DealResponse]:
    return [DealResponse.from_domain(d) for d in service.list()]


@router.get("/{deal_id}", response_model=DealResponse, responses={404: {"model": ErrorResponse}})
def get_deal(deal_id: str, service: DealService = Depends(get_deal_service)) -> DealResponse:
    return DealResponse.from_domain(service.get(deal_id))


@router.post(
    "",
    response_model=DealResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
def create_deal(
    request_data: DealCreateRequest,
    user: User = Depends(get_current_user),
    service: DealService = Depends(get_deal_service),
) -> DealResponse:
    return DealResponse.from_domain(service.create(user, request_data.to_domain()))


@router.patch(
    "/{deal_id}",
    response_model=DealResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def update_deal(
    deal_id: str,
    request_data: DealUpdateRequest,
    user: User = Depends(get_current_user),
    service: DealService = Depends(get_deal_service),
) -> DealResponse:
    return DealResponse.from_domain(service.update(user, deal_id, request_data.changes()))


@router.delete(
    "/{deal_id}",
    response_model=MessageResponse,
    responses={403: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def delete_deal(
    deal_id: str,
    user: User = Depends(get_current_user),
    service: DealService = Depends(get_deal_service),
) -> MessageResponse:
    service.delete(user, deal_id)
    return MessageResponse(message="Deal deleted")
