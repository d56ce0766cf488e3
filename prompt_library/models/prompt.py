from sqlalchemy import Column, String, DateTime, Text, Integer, Float, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid
import enum
from prompt_library.database import Base
from prompt_library.models.tag import prompt_tags


class Difficulty(str, enum.Enum):
    EASY = "easy"
    MEDIUM = "medium"
    HARD = "hard"


DEFAULT_CATEGORY = "Uncategorized"
DEFAULT_ESTIMATED_TIME = "5-10 minutes"


class Prompt(Base):
    __tablename__ = "prompts"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    title = Column(String(200), nullable=False, index=True)
    description = Column(Text, nullable=False, default="")
    prompt = Column(Text, nullable=False)
    summary = Column(Text, nullable=True)  # Explicit summary; heuristic is used when empty

    # Denormalized category name, plus the resolved Category row when one exists
    category = Column(String(200), nullable=False, default=DEFAULT_CATEGORY, index=True)
    category_id = Column(String(36), ForeignKey("categories.id"), nullable=True, index=True)

    difficulty = Column(String(20), nullable=False, default=Difficulty.MEDIUM.value)
    estimated_time = Column(String(100), nullable=False, default=DEFAULT_ESTIMATED_TIME)
    placeholders = Column(JSON, nullable=False, default=list)

    usage_count = Column(Integer, nullable=False, default=0)
    rating = Column(Float, nullable=False, default=0.0)  # Cached mean of review ratings

    author_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)
    last_used_at = Column(DateTime, nullable=True)

    author = relationship("User", back_populates="prompts")
    category_obj = relationship("Category", back_populates="prompts")
    tag_objects = relationship("Tag", secondary=prompt_tags, back_populates="prompts")
    reviews = relationship(
        "Review",
        back_populates="prompt",
        cascade="all, delete-orphan",
        order_by="Review.created_at.desc()",
    )
    comments = relationship("Comment", back_populates="prompt", cascade="all, delete-orphan")

    @property
    def tags(self):
        return sorted(tag.name for tag in self.tag_objects)
