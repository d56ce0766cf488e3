from typing import Dict, List

from sqlalchemy import func
from sqlalchemy.orm import Session, selectinload

from prompt_library import serializers
from prompt_library.models import Category, Prompt, Review, User
from prompt_library.schemas import (
    ActivityStatsResponse,
    CategoryCount,
    StatsAverages,
    StatsResponse,
    StatsTotals,
    UserPromptStats,
    UserReviewStats,
    UserStatsResponse,
)
from prompt_library.services.activity_service import ActivityService

TOP_N = 5
RECENT_ACTIVITY_LIMIT = 10


class StatsService:
    """Read-only rollups over the catalog and the activity log."""

    def __init__(self, db: Session, activity: ActivityService):
        self.db = db
        self.activity = activity

    def _review_counts(self, prompt_ids: List[str]) -> Dict[str, int]:
        if not prompt_ids:
            return {}
        rows = (
            self.db.query(Review.prompt_id, func.count(Review.id))
            .filter(Review.prompt_id.in_(prompt_ids))
            .group_by(Review.prompt_id)
            .all()
        )
        return dict(rows)

    def _stats_items(self, prompts: List[Prompt]):
        counts = self._review_counts([prompt.id for prompt in prompts])
        return [serializers.prompt_stats_item(prompt, counts.get(prompt.id, 0)) for prompt in prompts]

    def get_stats(self) -> StatsResponse:
        totals = StatsTotals(
            prompts=self.db.query(func.count(Prompt.id)).scalar() or 0,
            categories=self.db.query(func.count(Category.id)).scalar() or 0,
            users=self.db.query(func.count(User.id)).scalar() or 0,
            reviews=self.db.query(func.count(Review.id)).scalar() or 0,
            usage=self.db.query(func.sum(Prompt.usage_count)).scalar() or 0,
        )
        average_rating = self.db.query(func.avg(Prompt.rating)).scalar() or 0.0

        prompt_count = func.count(Prompt.id)
        top_categories = (
            self.db.query(Category.id, Category.name, prompt_count)
            .outerjoin(Prompt, Prompt.category_id == Category.id)
            .group_by(Category.id, Category.name)
            .order_by(prompt_count.desc(), Category.name.asc())
            .limit(TOP_N)
            .all()
        )

        base = self.db.query(Prompt).options(selectinload(Prompt.author))
        recent_prompts = base.order_by(Prompt.created_at.desc()).limit(TOP_N).all()
        top_rated_prompts = (
            base.filter(Prompt.rating > 0)
            .order_by(Prompt.rating.desc(), Prompt.created_at.desc())
            .limit(TOP_N)
            .all()
        )

        return StatsResponse(
            totals=totals,
            averages=StatsAverages(rating=float(average_rating)),
            top_categories=[
                CategoryCount(id=category_id, name=name, prompt_count=count)
                for category_id, name, count in top_categories
            ],
            recent_prompts=self._stats_items(recent_prompts),
            top_rated_prompts=self._stats_items(top_rated_prompts),
        )

    def get_activity_stats(self, timeframe: str = None) -> ActivityStatsResponse:
        return ActivityStatsResponse(**self.activity.get_activity_stats(timeframe))

    def get_user_stats(self, user_id: str) -> UserStatsResponse:
        user_prompts = (
            self.db.query(Prompt)
            .options(selectinload(Prompt.author), selectinload(Prompt.reviews), selectinload(Prompt.tag_objects))
            .filter(Prompt.author_id == user_id)
            .order_by(Prompt.created_at.desc())
            .all()
        )
        user_reviews = (
            self.db.query(Review)
            .options(selectinload(Review.prompt))
            .filter(Review.user_id == user_id)
            .order_by(Review.created_at.desc())
            .all()
        )
        activities = self.activity.get_user_activities(user_id, limit=RECENT_ACTIVITY_LIMIT)

        return UserStatsResponse(
            prompts=UserPromptStats(
                total=len(user_prompts),
                total_usage=sum(prompt.usage_count or 0 for prompt in user_prompts),
                total_reviews=sum(len(prompt.reviews) for prompt in user_prompts),
                recent=[serializers.prompt_response(prompt) for prompt in user_prompts[:TOP_N]],
            ),
            reviews=UserReviewStats(
                total=len(user_reviews),
                recent=[serializers.user_review_response(review) for review in user_reviews[:TOP_N]],
            ),
            recent_activity=serializers.activity_responses(activities),
        )
