"""
Prompt catalog - listing, search, CRUD, usage tracking and reviews.

All writes that belong to one operation are committed before the matching
activity event is recorded, so a failing activity sink never affects them.
"""

import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func, or_
from sqlalchemy.orm import Session, selectinload

from prompt_library.errors import NotFoundError, ValidationError
from prompt_library.models import (
    Category,
    Difficulty,
    Prompt,
    Review,
    Tag,
    prompt_tags,
    DEFAULT_CATEGORY,
    DEFAULT_ESTIMATED_TIME,
)
from prompt_library.services.activity_service import ActivityService, RequestMeta
from prompt_library.services.authorization import require_owner
from prompt_library.services.rating import MAX_RATING, MIN_RATING, is_valid_rating, recompute_rating

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 50
MAX_LIMIT = 200
# Largest value a signed 64-bit OFFSET accepts
MAX_OFFSET = 2**63 - 1

# Fields a client may set on a prompt; rating, usage_count and author_id are not among them
EDITABLE_FIELDS = (
    "title",
    "description",
    "prompt",
    "summary",
    "category",
    "tags",
    "difficulty",
    "estimated_time",
    "placeholders",
)

REVIEW_TEXT_FIELDS = (
    "comment",
    "tool_used",
    "what_worked",
    "what_didnt_work",
    "improvement_suggestions",
    "test_run_graphics_link",
    "prompt_edits",
)


def coerce_int(value: Any, default: int, minimum: int = 0, maximum: Optional[int] = None) -> int:
    """Parse a query-string integer, falling back to the default and clamping to range."""
    try:
        number = int(value)
    except (TypeError, ValueError):
        return default
    number = max(number, minimum)
    if maximum is not None:
        number = min(number, maximum)
    return number


def coerce_float(value: Any) -> Optional[float]:
    try:
        return float(value)
    except (TypeError, ValueError):
        return None


def split_tags(value: Optional[str]) -> List[str]:
    """Split a comma-separated tag filter."""
    if not value:
        return []
    return [tag.strip() for tag in value.split(",") if tag.strip()]


def resolve_tags(db: Session, names: List[str]) -> List[Tag]:
    """Tag rows for the given names, creating the missing ones (order kept, duplicates dropped)."""
    wanted = []
    for name in names or []:
        name = str(name).strip()
        if name and name not in wanted:
            wanted.append(name)
    if not wanted:
        return []

    existing = {tag.name: tag for tag in db.query(Tag).filter(Tag.name.in_(wanted)).all()}
    tags = []
    for name in wanted:
        tag = existing.get(name)
        if tag is None:
            tag = Tag(name=name)
            db.add(tag)
        tags.append(tag)
    return tags


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


class PromptCatalog:
    """Catalog operations over one request-scoped database session."""

    def __init__(self, db: Session, activity: ActivityService):
        self.db = db
        self.activity = activity

    def _with_relations(self):
        return self.db.query(Prompt).options(
            selectinload(Prompt.author),
            selectinload(Prompt.reviews),
            selectinload(Prompt.tag_objects),
        )

    def _get_or_404(self, prompt_id: str) -> Prompt:
        prompt = self.db.query(Prompt).filter(Prompt.id == prompt_id).first()
        if not prompt:
            raise NotFoundError("Prompt not found")
        return prompt

    def _resolve_category(self, name: str) -> Optional[Category]:
        return self.db.query(Category).filter(Category.name == name).first()

    @staticmethod
    def _validate_difficulty(difficulty: str):
        valid = [d.value for d in Difficulty]
        if difficulty not in valid:
            raise ValidationError(f"Invalid difficulty. Valid values: {valid}")

    # Queries

    def list_prompts(
        self,
        category: Optional[str] = None,
        search: Optional[str] = None,
        tags: Optional[List[str]] = None,
        limit: Any = DEFAULT_LIMIT,
        offset: Any = 0,
    ) -> List[Prompt]:
        """
        List prompts, newest first.

        Args:
            category: Exact match on the prompt's category name
            search: Case-insensitive substring of title, description or body
            tags: Prompts carrying at least one of these tags
            limit: Page size (default 50)
            offset: Number of prompts to skip
        """
        query = self._with_relations()

        if category:
            query = query.filter(Prompt.category == category)

        if search:
            query = query.filter(or_(
                Prompt.title.icontains(search, autoescape=True),
                Prompt.description.icontains(search, autoescape=True),
                Prompt.prompt.icontains(search, autoescape=True),
            ))

        if tags:
            query = query.filter(Prompt.tag_objects.any(Tag.name.in_(tags)))

        return (
            query.order_by(Prompt.created_at.desc())
            .offset(coerce_int(offset, 0, maximum=MAX_OFFSET))
            .limit(coerce_int(limit, DEFAULT_LIMIT, maximum=MAX_LIMIT))
            .all()
        )

    def search_prompts(
        self,
        q: Optional[str] = None,
        category: Optional[str] = None,
        min_rating: Any = None,
    ) -> List[Prompt]:
        """Search by text over title, body and category name; best rated first."""
        query = self._with_relations()

        if q:
            query = query.filter(or_(
                Prompt.title.icontains(q, autoescape=True),
                Prompt.prompt.icontains(q, autoescape=True),
                Prompt.category.icontains(q, autoescape=True),
            ))

        if category:
            query = query.filter(Prompt.category == category)

        threshold = coerce_float(min_rating)
        if threshold is not None:
            query = query.filter(Prompt.rating >= threshold)

        return query.order_by(Prompt.rating.desc(), Prompt.usage_count.desc()).all()

    def get_prompt(self, prompt_id: str, viewer_id: Optional[str] = None, meta: Optional[RequestMeta] = None) -> Prompt:
        prompt = (
            self.db.query(Prompt)
            .options(
                selectinload(Prompt.author),
                selectinload(Prompt.reviews).selectinload(Review.user),
                selectinload(Prompt.tag_objects),
                selectinload(Prompt.category_obj),
            )
            .filter(Prompt.id == prompt_id)
            .first()
        )
        if not prompt:
            raise NotFoundError("Prompt not found")

        self.activity.log_prompt_view(prompt.id, viewer_id, meta)
        return prompt

    def list_tags(self) -> List[Tuple[str, int]]:
        """Tags used by at least one prompt, with their prompt counts, most used first."""
        usage = func.count(prompt_tags.c.prompt_id)
        rows = (
            self.db.query(Tag.name, usage)
            .outerjoin(prompt_tags, prompt_tags.c.tag_id == Tag.id)
            .group_by(Tag.id, Tag.name)
            .having(usage > 0)
            .order_by(usage.desc(), Tag.name.asc())
            .all()
        )
        return [(name, count) for name, count in rows]

    # Mutations

    def create_prompt(self, fields: Dict[str, Any], author_id: str, meta: Optional[RequestMeta] = None) -> Prompt:
        if _is_blank(fields.get("title")) or _is_blank(fields.get("prompt")):
            raise ValidationError("Title and prompt are required")

        difficulty = fields.get("difficulty") or Difficulty.MEDIUM.value
        self._validate_difficulty(difficulty)

        category_name = fields.get("category") or DEFAULT_CATEGORY
        category = self._resolve_category(category_name)

        prompt = Prompt(
            title=fields["title"],
            description=fields.get("description") or "",
            prompt=fields["prompt"],
            summary=fields.get("summary") or None,
            category=category_name,
            category_id=category.id if category else None,
            difficulty=difficulty,
            estimated_time=fields.get("estimated_time") or DEFAULT_ESTIMATED_TIME,
            placeholders=fields.get("placeholders") or [],
            usage_count=0,
            rating=0.0,
            author_id=author_id,
        )
        prompt.tag_objects = resolve_tags(self.db, fields.get("tags") or [])

        self.db.add(prompt)
        self.db.commit()
        self.db.refresh(prompt)
        logger.info(f"Created prompt {prompt.id} by user {author_id}")

        self.activity.log_prompt_create(prompt.id, author_id, meta)
        return prompt

    def update_prompt(
        self,
        prompt_id: str,
        changes: Dict[str, Any],
        requester_id: str,
        meta: Optional[RequestMeta] = None,
    ) -> Prompt:
        prompt = self._get_or_404(prompt_id)
        require_owner(prompt.author_id, requester_id, "You can only edit your own prompts")

        changes = {key: value for key, value in changes.items() if key in EDITABLE_FIELDS}
        # Only summary may be cleared; a null for any other field means "leave as is"
        changes = {key: value for key, value in changes.items() if value is not None or key == "summary"}

        for required in ("title", "prompt"):
            if required in changes and _is_blank(changes[required]):
                raise ValidationError(f"{required.capitalize()} cannot be empty")
        if "difficulty" in changes:
            self._validate_difficulty(changes["difficulty"])

        for key, value in changes.items():
            if key == "tags":
                prompt.tag_objects = resolve_tags(self.db, value)
            elif key == "category":
                category = self._resolve_category(value)
                prompt.category = value
                prompt.category_id = category.id if category else None
            elif key == "summary":
                prompt.summary = value or None
            else:
                setattr(prompt, key, value)

        prompt.updated_at = datetime.utcnow()
        self.db.commit()
        self.db.refresh(prompt)

        self.activity.log_prompt_edit(prompt.id, requester_id, meta)
        return prompt

    def delete_prompt(self, prompt_id: str, requester_id: str, meta: Optional[RequestMeta] = None):
        prompt = self._get_or_404(prompt_id)
        require_owner(prompt.author_id, requester_id, "You can only delete your own prompts")

        self.db.delete(prompt)
        self.db.commit()
        logger.info(f"Deleted prompt {prompt_id} by user {requester_id}")

        self.activity.log_prompt_delete(prompt_id, requester_id, meta)

    def increment_usage(self, prompt_id: str, user_id: Optional[str] = None, meta: Optional[RequestMeta] = None) -> int:
        """Add one use to the prompt's counter; anonymous callers are allowed."""
        updated = (
            self.db.query(Prompt)
            .filter(Prompt.id == prompt_id)
            .update(
                {Prompt.usage_count: Prompt.usage_count + 1, Prompt.last_used_at: datetime.utcnow()},
                synchronize_session=False,
            )
        )
        if not updated:
            self.db.rollback()
            raise NotFoundError("Prompt not found")
        self.db.commit()

        self.activity.log_prompt_test(prompt_id, user_id, meta)
        return self.db.query(Prompt.usage_count).filter(Prompt.id == prompt_id).scalar()

    def add_review(
        self,
        prompt_id: str,
        fields: Dict[str, Any],
        user_id: str,
        meta: Optional[RequestMeta] = None,
    ) -> Review:
        """
        Add a review and refresh the prompt's cached average rating.

        The review insert and the rating recomputation are separate commits.
        """
        rating = fields.get("rating")
        if not is_valid_rating(rating):
            raise ValidationError(f"Rating must be between {MIN_RATING} and {MAX_RATING}")

        self._get_or_404(prompt_id)

        parent_id = fields.get("parent_review_id")
        if parent_id:
            parent = self.db.query(Review).filter(Review.id == parent_id).first()
            if not parent or parent.prompt_id != prompt_id:
                raise ValidationError("Parent review not found on this prompt")

        review = Review(
            prompt_id=prompt_id,
            user_id=user_id,
            rating=rating,
            media_files=fields.get("media_files") or [],
            screenshots=fields.get("screenshots") or [],
            parent_review_id=parent_id or None,
        )
        for key in REVIEW_TEXT_FIELDS:
            setattr(review, key, fields.get(key) or None)

        self.db.add(review)
        self.db.commit()

        recompute_rating(self.db, prompt_id)
        self.db.refresh(review)

        self.activity.log_review_add(prompt_id, review.id, user_id, meta)
        return review
