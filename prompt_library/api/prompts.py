from typing import List, Optional

from fastapi import APIRouter, Depends, Response

from prompt_library import serializers
from prompt_library.api.deps import (
    get_catalog,
    get_comment_service,
    get_current_user,
    get_optional_user,
    get_request_meta,
)
from prompt_library.models import User
from prompt_library.schemas import (
    CommentCreate,
    CommentResponse,
    DataResponse,
    PromptCreate,
    PromptDetailResponse,
    PromptResponse,
    PromptUpdate,
    ReviewCreate,
    ReviewResponse,
    UsageResponse,
)
from prompt_library.services import CommentService, PromptCatalog, RequestMeta
from prompt_library.services.prompt_catalog import split_tags

router = APIRouter(prefix="/prompts", tags=["prompts"])


@router.get("", response_model=DataResponse[List[PromptResponse]])
def list_prompts(
    category: Optional[str] = None,
    search: Optional[str] = None,
    tags: Optional[str] = None,
    limit: Optional[str] = None,
    offset: Optional[str] = None,
    catalog: PromptCatalog = Depends(get_catalog),
):
    """
    List prompts, newest first.

    Args:
        category: Exact category name
        search: Case-insensitive text over title, description and body
        tags: Comma-separated; prompts with any of these tags match
        limit: Page size (default 50)
        offset: Number of prompts to skip (default 0)
    """
    prompts = catalog.list_prompts(
        category=category,
        search=search,
        tags=split_tags(tags),
        limit=limit if limit is not None else 50,
        offset=offset if offset is not None else 0,
    )
    return DataResponse(data=[serializers.prompt_response(p) for p in prompts])


@router.get("/{prompt_id}", response_model=DataResponse[PromptDetailResponse])
def get_prompt(
    prompt_id: str,
    catalog: PromptCatalog = Depends(get_catalog),
    user: Optional[User] = Depends(get_optional_user),
    meta: RequestMeta = Depends(get_request_meta),
):
    """Get a prompt with its reviews and category."""
    prompt = catalog.get_prompt(prompt_id, viewer_id=user.id if user else None, meta=meta)
    return DataResponse(data=serializers.prompt_detail_response(prompt))


@router.post("", response_model=DataResponse[PromptResponse], status_code=201)
def create_prompt(
    prompt_data: PromptCreate,
    catalog: PromptCatalog = Depends(get_catalog),
    user: User = Depends(get_current_user),
    meta: RequestMeta = Depends(get_request_meta),
):
    prompt = catalog.create_prompt(prompt_data.model_dump(), author_id=user.id, meta=meta)
    return DataResponse(data=serializers.prompt_response(prompt))


@router.put("/{prompt_id}", response_model=DataResponse[PromptResponse])
def update_prompt(
    prompt_id: str,
    prompt_data: PromptUpdate,
    catalog: PromptCatalog = Depends(get_catalog),
    user: User = Depends(get_current_user),
    meta: RequestMeta = Depends(get_request_meta),
):
    """Update a prompt; only its author may do so."""
    prompt = catalog.update_prompt(prompt_id, prompt_data.model_dump(exclude_unset=True), requester_id=user.id, meta=meta)
    return DataResponse(data=serializers.prompt_response(prompt))


@router.delete("/{prompt_id}", status_code=204)
def delete_prompt(
    prompt_id: str,
    catalog: PromptCatalog = Depends(get_catalog),
    user: User = Depends(get_current_user),
    meta: RequestMeta = Depends(get_request_meta),
):
    """Delete a prompt; only its author may do so."""
    catalog.delete_prompt(prompt_id, requester_id=user.id, meta=meta)
    return Response(status_code=204)


@router.post("/{prompt_id}/use", response_model=UsageResponse)
def track_usage(
    prompt_id: str,
    catalog: PromptCatalog = Depends(get_catalog),
    user: Optional[User] = Depends(get_optional_user),
    meta: RequestMeta = Depends(get_request_meta),
):
    """Count one use of a prompt. No authentication needed."""
    usage_count = catalog.increment_usage(prompt_id, user_id=user.id if user else None, meta=meta)
    return UsageResponse(message="Usage tracked", usage_count=usage_count)


@router.post("/{prompt_id}/review", response_model=DataResponse[ReviewResponse], status_code=201)
def add_review(
    prompt_id: str,
    review_data: ReviewCreate,
    catalog: PromptCatalog = Depends(get_catalog),
    user: User = Depends(get_current_user),
    meta: RequestMeta = Depends(get_request_meta),
):
    """Add a 1-5 review; the prompt's average rating is recomputed."""
    review = catalog.add_review(prompt_id, review_data.model_dump(), user_id=user.id, meta=meta)
    return DataResponse(data=serializers.review_response(review))


@router.get("/{prompt_id}/comments", response_model=DataResponse[List[CommentResponse]])
def list_comments(prompt_id: str, comments: CommentService = Depends(get_comment_service)):
    return DataResponse(data=[serializers.comment_response(c) for c in comments.list_comments(prompt_id)])


@router.post("/{prompt_id}/comments", response_model=DataResponse[CommentResponse], status_code=201)
def add_comment(
    prompt_id: str,
    comment_data: CommentCreate,
    comments: CommentService = Depends(get_comment_service),
    user: User = Depends(get_current_user),
):
    comment = comments.add_comment(prompt_id, comment_data.content, user_id=user.id, parent_id=comment_data.parent_id)
    return DataResponse(data=serializers.comment_response(comment))
