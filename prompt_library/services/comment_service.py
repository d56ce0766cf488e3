from typing import List, Optional

from sqlalchemy.orm import Session, selectinload

from prompt_library.errors import NotFoundError, ValidationError
from prompt_library.models import Comment, Prompt


class CommentService:
    """Threaded discussion on a prompt. Comments carry no rating."""

    def __init__(self, db: Session):
        self.db = db

    def _require_prompt(self, prompt_id: str):
        if not self.db.query(Prompt.id).filter(Prompt.id == prompt_id).first():
            raise NotFoundError("Prompt not found")

    def list_comments(self, prompt_id: str) -> List[Comment]:
        """Top-level comments, oldest first, with their replies loaded."""
        self._require_prompt(prompt_id)
        return (
            self.db.query(Comment)
            .options(
                selectinload(Comment.user),
                selectinload(Comment.replies).selectinload(Comment.user),
            )
            .filter(Comment.prompt_id == prompt_id, Comment.parent_id.is_(None))
            .order_by(Comment.created_at.asc())
            .all()
        )

    def add_comment(self, prompt_id: str, content: Optional[str], user_id: str, parent_id: Optional[str] = None) -> Comment:
        if not content or not content.strip():
            raise ValidationError("Comment content is required")
        self._require_prompt(prompt_id)

        if parent_id:
            parent = self.db.query(Comment).filter(Comment.id == parent_id).first()
            if not parent or parent.prompt_id != prompt_id:
                raise ValidationError("Parent comment not found on this prompt")

        comment = Comment(prompt_id=prompt_id, user_id=user_id, content=content, parent_id=parent_id or None)
        self.db.add(comment)
        self.db.commit()
        self.db.refresh(comment)
        return comment
