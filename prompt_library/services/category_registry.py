import logging
from datetime import datetime
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import func
from sqlalchemy.orm import Session

from prompt_library.errors import CategoryNotEmptyError, ConflictError, NotFoundError, ValidationError
from prompt_library.models import Category, Prompt

logger = logging.getLogger(__name__)

CATEGORY_FIELDS = ("name", "description", "color", "icon")


class CategoryRegistry:
    """Shared categories. A category is never removed while prompts point at it."""

    def __init__(self, db: Session):
        self.db = db

    def _get_or_404(self, category_id: str) -> Category:
        category = self.db.query(Category).filter(Category.id == category_id).first()
        if not category:
            raise NotFoundError("Category not found")
        return category

    def prompt_count(self, category_id: str) -> int:
        return self.db.query(func.count(Prompt.id)).filter(Prompt.category_id == category_id).scalar() or 0

    def list_categories(self) -> List[Tuple[Category, int]]:
        """All categories by name, each with the number of prompts referencing it."""
        count = func.count(Prompt.id)
        rows = (
            self.db.query(Category, count)
            .outerjoin(Prompt, Prompt.category_id == Category.id)
            .group_by(Category.id)
            .order_by(Category.name.asc())
            .all()
        )
        return [(category, prompt_count) for category, prompt_count in rows]

    def create_category(
        self,
        name: Optional[str],
        description: Optional[str] = None,
        color: Optional[str] = None,
        icon: Optional[str] = None,
    ) -> Category:
        if not name or not name.strip():
            raise ValidationError("Category name is required")

        if self.db.query(Category).filter(Category.name == name).first():
            raise ConflictError("Category with this name already exists")

        category = Category(
            name=name,
            description=description or None,
            color=color or None,
            icon=icon or None,
        )
        self.db.add(category)
        self.db.flush()

        # Prompts created before the category existed carry only its name
        self.db.query(Prompt).filter(Prompt.category == name, Prompt.category_id.is_(None)).update(
            {Prompt.category_id: category.id}, synchronize_session=False
        )
        self.db.commit()
        self.db.refresh(category)
        logger.info(f"Created category {category.id} ({name})")
        return category

    def update_category(self, category_id: str, changes: Dict[str, Any]) -> Category:
        category = self._get_or_404(category_id)
        changes = {key: value for key, value in changes.items() if key in CATEGORY_FIELDS}

        if "name" in changes:
            new_name = changes["name"]
            if not new_name or not new_name.strip():
                raise ValidationError("Category name cannot be empty")
            clash = (
                self.db.query(Category)
                .filter(Category.name == new_name, Category.id != category.id)
                .first()
            )
            if clash:
                raise ConflictError("Category with this name already exists")

        for key, value in changes.items():
            setattr(category, key, value)
        category.updated_at = datetime.utcnow()

        self.db.commit()
        self.db.refresh(category)
        return category

    def delete_category(self, category_id: str):
        category = self._get_or_404(category_id)
        if self.prompt_count(category.id) > 0:
            raise CategoryNotEmptyError()

        self.db.delete(category)
        self.db.commit()
        logger.info(f"Deleted category {category_id}")
