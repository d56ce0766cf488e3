from pydantic import BaseModel
from pydantic.alias_generators import to_camel
from typing import Any, Dict, Generic, List, Optional, TypeVar
from datetime import datetime

T = TypeVar("T")


class APIModel(BaseModel):
    """Base for all payloads: snake_case in Python, camelCase on the wire."""

    class Config:
        from_attributes = True
        alias_generator = to_camel
        populate_by_name = True


class DataResponse(APIModel, Generic[T]):
    data: T


class MessageResponse(APIModel):
    message: str


# Users / auth

class UserPublic(APIModel):
    id: str
    name: str
    avatar: Optional[str] = None


class UserResponse(APIModel):
    id: str
    email: str
    name: str
    avatar: Optional[str] = None
    provider: str
    verified: bool


class SignupRequest(APIModel):
    email: Optional[str] = None
    password: Optional[str] = None
    name: Optional[str] = None


class SigninRequest(APIModel):
    email: Optional[str] = None
    password: Optional[str] = None


class VerificationRequest(APIModel):
    email: Optional[str] = None


class VerifyCodeRequest(APIModel):
    email: Optional[str] = None
    code: Optional[str] = None


class AuthResponse(APIModel):
    success: bool = True
    token: str
    user: UserResponse


class TokenResponse(APIModel):
    success: bool = True
    token: str


class CurrentUserResponse(APIModel):
    success: bool = True
    user: UserResponse


class VerificationSentResponse(APIModel):
    success: bool = True
    message: str


# Categories

class CategoryCreate(APIModel):
    name: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None


class CategoryUpdate(APIModel):
    name: Optional[str] = None
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None


class CategoryResponse(APIModel):
    id: str
    name: str
    description: Optional[str] = None
    color: Optional[str] = None
    icon: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    prompt_count: Optional[int] = None


class TagResponse(APIModel):
    name: str
    usage_count: int


# Reviews and comments

class ReviewCreate(APIModel):
    rating: Optional[int] = None
    comment: Optional[str] = None
    tool_used: Optional[str] = None
    what_worked: Optional[str] = None
    what_didnt_work: Optional[str] = None
    improvement_suggestions: Optional[str] = None
    test_run_graphics_link: Optional[str] = None
    prompt_edits: Optional[str] = None
    media_files: Optional[List[str]] = None
    screenshots: Optional[List[str]] = None
    parent_review_id: Optional[str] = None


class ReviewResponse(APIModel):
    id: str
    prompt_id: str
    user_id: Optional[str] = None
    rating: int
    comment: Optional[str] = None
    tool_used: Optional[str] = None
    what_worked: Optional[str] = None
    what_didnt_work: Optional[str] = None
    improvement_suggestions: Optional[str] = None
    test_run_graphics_link: Optional[str] = None
    prompt_edits: Optional[str] = None
    media_files: List[str] = []
    screenshots: List[str] = []
    parent_review_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    user: Optional[UserPublic] = None


class PromptRef(APIModel):
    id: str
    title: str


class UserReviewResponse(ReviewResponse):
    prompt: Optional[PromptRef] = None


class CommentCreate(APIModel):
    content: Optional[str] = None
    parent_id: Optional[str] = None


class CommentResponse(APIModel):
    id: str
    prompt_id: str
    user_id: Optional[str] = None
    content: str
    parent_id: Optional[str] = None
    created_at: datetime
    updated_at: datetime
    user: Optional[UserPublic] = None
    replies: List["CommentResponse"] = []


CommentResponse.model_rebuild()


# Prompts

class PromptCreate(APIModel):
    title: Optional[str] = None
    description: Optional[str] = None
    prompt: Optional[str] = None
    summary: Optional[str] = None
    category: Optional[str] = None
    tags: Optional[List[str]] = None
    difficulty: Optional[str] = None
    estimated_time: Optional[str] = None
    placeholders: Optional[List[Any]] = None


class PromptUpdate(PromptCreate):
    """Same fields as PromptCreate; only the ones present in the body are applied."""


class PromptResponse(APIModel):
    id: str
    title: str
    description: str
    prompt: str
    summary: str
    category: str
    category_id: Optional[str] = None
    tags: List[str] = []
    difficulty: str
    estimated_time: str
    placeholders: List[Any] = []
    usage_count: int
    rating: float
    author_id: Optional[str] = None
    author: Optional[UserPublic] = None
    created_at: datetime
    updated_at: datetime
    last_used_at: Optional[datetime] = None
    review_count: int = 0
    avg_rating: float = 0.0


class PromptDetailResponse(PromptResponse):
    reviews: List[ReviewResponse] = []
    category_obj: Optional[CategoryResponse] = None


class UsageResponse(APIModel):
    message: str
    usage_count: int


# Stats

class StatsTotals(APIModel):
    prompts: int
    categories: int
    users: int
    reviews: int
    usage: int


class StatsAverages(APIModel):
    rating: float


class CategoryCount(APIModel):
    id: str
    name: str
    prompt_count: int


class PromptStatsItem(APIModel):
    id: str
    title: str
    category: str
    author: Optional[UserPublic] = None
    review_count: int
    rating: float
    created_at: datetime


class StatsResponse(APIModel):
    totals: StatsTotals
    averages: StatsAverages
    top_categories: List[CategoryCount]
    recent_prompts: List[PromptStatsItem]
    top_rated_prompts: List[PromptStatsItem]


class ActivityResponse(APIModel):
    id: str
    user_id: Optional[str] = None
    action: str
    details: Optional[Dict[str, Any]] = None
    created_at: datetime


class ActivityStatsResponse(APIModel):
    timeframe: str
    total: int
    breakdown: Dict[str, int]


class UserPromptStats(APIModel):
    total: int
    total_usage: int
    total_reviews: int
    recent: List[PromptResponse]


class UserReviewStats(APIModel):
    total: int
    recent: List[UserReviewResponse]


class UserStatsResponse(APIModel):
    prompts: UserPromptStats
    reviews: UserReviewStats
    recent_activity: List[ActivityResponse]
