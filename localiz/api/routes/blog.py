"""Blog routes."""

from fastapi import APIRouter, Depends, status

from localiz.api.dependencies import get_blog_service, get_current_user
from localiz.api.models import BlogPostRequest, BlogPostResponse, ErrorResponse
from localiz.domain.marketplace import BlogService
from localiz.domain.models import User

router = APIRouter(prefix="/blog", tags=["blog"])


@router.get("", response_model=list[BlogPostResponse])
def list_posts(service: BlogService = Depends(get_blog_service)) -> list[BlogPostResponse]:
    """Posts newest first."""
    return [BlogPostResponse.from_domain(p) for p in service.list()]


@router.post(
    "",
    response_model=BlogPostResponse,
    status_code=status.HTTP_201_CREATED,
    responses={400: {"model": ErrorResponse}, 401: {"model": ErrorResponse}},
)
def create_post(
    request_data: BlogPostRequest,
    user: User = Depends(get_current_user),
    service: BlogService = Depends(get_blog_service),
) -> BlogPostResponse:
    post = service.create(user, request_data.title, request_data.content, request_data.image)
    return BlogPostResponse.from_domain(post)
