"""Utility routes - Postal code to town lookup for address forms."""

from fastapi import APIRouter, Depends

from localiz.api.dependencies import get_town_service
from localiz.api.models import ErrorResponse, TownResponse
from localiz.domain.towns import TownService

router = APIRouter(prefix="/utils", tags=["utils"])


@router.get(
    "/postal-to-town/{postal_code}",
    response_model=TownResponse,
    responses={
        400: {"model": ErrorResponse, "description": "Postal code missing"},
        502: {"model": ErrorResponse, "description": "Remote directory unreachable"},
    },
    summary="Resolve a French postal code to its town",
)
def postal_to_town(postal_code: str, service: TownService = Depends(get_town_service)) -> TownResponse:
    """An unknown code answers 200 with ``town: null`` and ``source: none``."""
    resolution = service.resolve(postal_code)
    return TownResponse(town=resolution.town, source=resolution.source)
