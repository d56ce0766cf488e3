from sqlalchemy import Column, String, DateTime, ForeignKey, Enum, JSON
from datetime import datetime
import uuid
import enum
from prompt_library.database import Base


class ActivityAction(str, enum.Enum):
    USER_SIGNUP = "user_signup"
    USER_SIGNIN = "user_signin"
    PROMPT_VIEWED = "prompt_viewed"
    PROMPT_CREATED = "prompt_created"
    PROMPT_EDITED = "prompt_edited"
    PROMPT_DELETED = "prompt_deleted"
    PROMPT_TESTED = "prompt_tested"
    REVIEW_ADDED = "review_added"


class UserActivity(Base):
    """Append-only audit record. Never updated or deleted by the catalog."""

    __tablename__ = "user_activities"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    user_id = Column(String(36), ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    action = Column(Enum(ActivityAction, native_enum=False, length=30), nullable=False, index=True)
    details = Column(JSON, nullable=True)  # e.g. {"promptId": ..., "reviewId": ...}
    ip_address = Column(String(64), nullable=True)
    user_agent = Column(String(500), nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow, index=True)
