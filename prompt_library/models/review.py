from sqlalchemy import Column, String, DateTime, Text, Integer, ForeignKey, JSON
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid
from prompt_library.database import Base


class Review(Base):
    __tablename__ = "reviews"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    prompt_id = Column(String(36), ForeignKey("prompts.id", ondelete="CASCADE"), nullable=False, index=True)
    user_id = Column(String(36), ForeignKey("users.id"), nullable=True, index=True)
    rating = Column(Integer, nullable=False)

    comment = Column(Text, nullable=True)
    tool_used = Column(String(200), nullable=True)
    what_worked = Column(Text, nullable=True)
    what_didnt_work = Column(Text, nullable=True)
    improvement_suggestions = Column(Text, nullable=True)
    test_run_graphics_link = Column(String(1000), nullable=True)
    prompt_edits = Column(Text, nullable=True)
    media_files = Column(JSON, nullable=False, default=list)
    screenshots = Column(JSON, nullable=False, default=list)

    # Threaded replies; a reply goes with its parent
    parent_review_id = Column(String(36), ForeignKey("reviews.id", ondelete="CASCADE"), nullable=True, index=True)

    created_at = Column(DateTime, default=datetime.utcnow, index=True)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    prompt = relationship("Prompt", back_populates="reviews")
    user = relationship("User", back_populates="reviews")
    parent = relationship("Review", back_populates="replies", remote_side=[id])
    replies = relationship("Review", back_populates="parent", cascade="all, delete")
