"""Shape ORM rows into response models, attaching read-time aggregates."""

from typing import List, Optional

from prompt_library.models import Category, Comment, Prompt, Review, User, UserActivity
from prompt_library.schemas import (
    ActivityResponse,
    CategoryResponse,
    CommentResponse,
    PromptDetailResponse,
    PromptRef,
    PromptResponse,
    PromptStatsItem,
    ReviewResponse,
    UserPublic,
    UserResponse,
    UserReviewResponse,
)
from prompt_library.services.rating import mean_rating
from prompt_library.services.summary import summary_for


def user_public(user: Optional[User]) -> Optional[UserPublic]:
    if user is None:
        return None
    return UserPublic(id=user.id, name=user.name, avatar=user.avatar)


def user_response(user: User) -> UserResponse:
    return UserResponse.model_validate(user)


def category_response(category: Category, prompt_count: Optional[int] = None) -> CategoryResponse:
    response = CategoryResponse.model_validate(category)
    response.prompt_count = prompt_count
    return response


def review_response(review: Review, with_user: bool = True) -> ReviewResponse:
    return ReviewResponse(
        id=review.id,
        prompt_id=review.prompt_id,
        user_id=review.user_id,
        rating=review.rating,
        comment=review.comment,
        tool_used=review.tool_used,
        what_worked=review.what_worked,
        what_didnt_work=review.what_didnt_work,
        improvement_suggestions=review.improvement_suggestions,
        test_run_graphics_link=review.test_run_graphics_link,
        prompt_edits=review.prompt_edits,
        media_files=review.media_files or [],
        screenshots=review.screenshots or [],
        parent_review_id=review.parent_review_id,
        created_at=review.created_at,
        updated_at=review.updated_at,
        user=user_public(review.user) if with_user else None,
    )


def user_review_response(review: Review) -> UserReviewResponse:
    base = review_response(review, with_user=False)
    prompt = PromptRef(id=review.prompt.id, title=review.prompt.title) if review.prompt else None
    return UserReviewResponse(**base.model_dump(), prompt=prompt)


def _prompt_fields(prompt: Prompt) -> dict:
    ratings = [review.rating for review in prompt.reviews]
    return dict(
        id=prompt.id,
        title=prompt.title,
        description=prompt.description or "",
        prompt=prompt.prompt,
        summary=summary_for(prompt),
        category=prompt.category,
        category_id=prompt.category_id,
        tags=prompt.tags,
        difficulty=prompt.difficulty,
        estimated_time=prompt.estimated_time,
        placeholders=prompt.placeholders or [],
        usage_count=prompt.usage_count or 0,
        rating=prompt.rating or 0.0,
        author_id=prompt.author_id,
        author=user_public(prompt.author),
        created_at=prompt.created_at,
        updated_at=prompt.updated_at,
        last_used_at=prompt.last_used_at,
        review_count=len(ratings),
        avg_rating=mean_rating(ratings),
    )


def prompt_response(prompt: Prompt) -> PromptResponse:
    """List item: cached rating plus reviewCount/avgRating computed from the loaded reviews."""
    return PromptResponse(**_prompt_fields(prompt))


def prompt_detail_response(prompt: Prompt) -> PromptDetailResponse:
    fields = _prompt_fields(prompt)
    # Detail view reports the live average as the rating
    fields["rating"] = fields["avg_rating"]
    return PromptDetailResponse(
        **fields,
        reviews=[review_response(review) for review in prompt.reviews],
        category_obj=category_response(prompt.category_obj) if prompt.category_obj else None,
    )


def prompt_stats_item(prompt: Prompt, review_count: int) -> PromptStatsItem:
    return PromptStatsItem(
        id=prompt.id,
        title=prompt.title,
        category=prompt.category,
        author=user_public(prompt.author),
        review_count=review_count,
        rating=prompt.rating or 0.0,
        created_at=prompt.created_at,
    )


def comment_response(comment: Comment, with_replies: bool = True) -> CommentResponse:
    return CommentResponse(
        id=comment.id,
        prompt_id=comment.prompt_id,
        user_id=comment.user_id,
        content=comment.content,
        parent_id=comment.parent_id,
        created_at=comment.created_at,
        updated_at=comment.updated_at,
        user=user_public(comment.user),
        replies=[comment_response(reply, with_replies=False) for reply in comment.replies] if with_replies else [],
    )


def activity_response(activity: UserActivity) -> ActivityResponse:
    return ActivityResponse(
        id=activity.id,
        user_id=activity.user_id,
        action=activity.action.value,
        details=activity.details,
        created_at=activity.created_at,
    )


def activity_responses(activities: List[UserActivity]) -> List[ActivityResponse]:
    return [activity_response(activity) for activity in activities]
