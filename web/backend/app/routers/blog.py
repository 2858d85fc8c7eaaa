"""Blog router -- published posts and their comments."""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status

from devhub.auth.models import User
from devhub.pagination import PageRequest
from devhub.services import Services
from web.backend.app.middleware.auth import get_current_user, get_services
from web.backend.app.models.api import (
    BlogPostEnvelope,
    BlogPostListResponse,
    BlogPostRequest,
    CommentEnvelope,
    CommentRequest,
    MessageResponse,
)
from web.backend.app.presenters import AuthorDirectory, engagement_response, post_response, post_responses

router = APIRouter(prefix="/api/blog", tags=["blog"])


@router.get("", response_model=BlogPostListResponse, summary="List published posts")
async def list_posts(
    page: Optional[str] = None,
    limit: Optional[str] = None,
    services: Services = Depends(get_services),
):
    """Published posts, newest first."""
    result = services.posts.list(PageRequest.parse(page, limit))
    return BlogPostListResponse(
        posts=post_responses(result.items, services.users),
        pagination=result.pagination("Posts"),
    )


@router.get("/{post_id}", response_model=BlogPostEnvelope, summary="Get a post")
async def get_post(post_id: str, services: Services = Depends(get_services)):
    """Return a published post and count the view."""
    post = services.posts.get_one(post_id)
    return BlogPostEnvelope(post=post_response(post, AuthorDirectory(services.users)))


@router.post(
    "",
    response_model=BlogPostEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Create a post",
)
async def create_post(
    body: BlogPostRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    post = services.posts.create(
        user.id,
        body.title,
        body.content,
        image_url=body.image,
        tags=body.tags,
        is_published=body.is_published is not False,
    )
    return BlogPostEnvelope(
        message="Blog post created successfully",
        post=post_response(post, AuthorDirectory(services.users)),
    )


@router.put("/{post_id}", response_model=BlogPostEnvelope, summary="Update a post")
async def update_post(
    post_id: str,
    body: BlogPostRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    """Replace title, content, image and tags. Author only.

    ``isPublished`` publishes a draft (or unpublishes a post) when given.
    """
    post = services.posts.update(
        post_id,
        user.id,
        body.title,
        body.content,
        image_url=body.image,
        tags=body.tags,
        is_published=body.is_published,
    )
    return BlogPostEnvelope(
        message="Blog post updated successfully",
        post=post_response(post, AuthorDirectory(services.users)),
    )


@router.delete("/{post_id}", response_model=MessageResponse, summary="Delete a post")
async def delete_post(
    post_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    services.posts.delete(post_id, user.id)
    return MessageResponse(message="Blog post deleted successfully")


@router.post(
    "/{post_id}/comments",
    response_model=CommentEnvelope,
    status_code=status.HTTP_201_CREATED,
    summary="Comment on a post",
)
async def add_comment(
    post_id: str,
    body: CommentRequest,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    comment = services.posts.add_engagement(post_id, user.id, body.text)
    return CommentEnvelope(
        message="Comment added successfully",
        comment=engagement_response(comment, AuthorDirectory(services.users)),
    )


@router.delete(
    "/{post_id}/comments/{comment_id}",
    response_model=MessageResponse,
    summary="Delete a comment",
)
async def delete_comment(
    post_id: str,
    comment_id: str,
    user: User = Depends(get_current_user),
    services: Services = Depends(get_services),
):
    """Allowed for the comment's author or the post's author."""
    services.posts.remove_engagement(post_id, comment_id, user.id)
    return MessageResponse(message="Comment deleted successfully")
