"""Rating routes - One rating per (author, rated user), public stats."""

from fastapi import APIRouter, Depends, Response, status

from localiz.api.dependencies import get_current_user, get_rating_service
from localiz.api.models import (
    ErrorResponse,
    MessageResponse,
    RatingRequest,
    RatingResponse,
    RatingStatsResponse,
)
from localiz.domain.models import User
from localiz.domain.ratings import RatingService

router = APIRouter(prefix="/ratings", tags=["ratings"])


@router.post(
    "/user/{user_id}",
    response_model=RatingResponse,
    responses={
        201: {"model": RatingResponse, "description": "Rating created"},
        400: {"model": ErrorResponse},
        401: {"model": ErrorResponse},
        404: {"model": ErrorResponse},
    },
    summary="Rate a user (create or update)",
)
def rate_user(
    user_id: str,
    request_data: RatingRequest,
    response: Response,
    user: User = Depends(get_current_user),
    service: RatingService = Depends(get_rating_service),
) -> RatingResponse:
    """Answers 201 when the rating is new, 200 when it replaced an earlier one."""
    rating, created = service.rate(user, user_id, request_data.value)
    response.status_code = status.HTTP_201_CREATED if created else status.HTTP_200_OK
    return RatingResponse.from_domain(rating)


@router.delete(
    "/user/{user_id}",
    response_model=MessageResponse,
    responses={401: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
def delete_rating(
    user_id: str,
    user: User = Depends(get_current_user),
    service: RatingService = Depends(get_rating_service),
) -> MessageResponse:
    service.remove(user, user_id)
    return MessageResponse(message="Rating deleted")


@router.get("/user/{user_id}/stats", response_model=RatingStatsResponse)
def rating_stats(user_id: str, service: RatingService = Depends(get_rating_service)) -> RatingStatsResponse:
    stats = service.stats(user_id)
    return RatingStatsResponse(count=stats.count, average=stats.average)
