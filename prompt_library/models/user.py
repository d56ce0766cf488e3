from sqlalchemy import Column, String, DateTime, Boolean
from sqlalchemy.orm import relationship
from datetime import datetime
import uuid
from prompt_library.database import Base


class User(Base):
    __tablename__ = "users"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String(320), unique=True, nullable=False, index=True)
    name = Column(String(200), nullable=False)
    avatar = Column(String(500), nullable=True)

    # Credential fields are owned by AuthService
    password_hash = Column(String(255), nullable=True)
    provider = Column(String(50), nullable=False, default="email")  # email, system
    verified = Column(Boolean, nullable=False, default=False)
    verification_code = Column(String(12), nullable=True)
    verification_expiry = Column(DateTime, nullable=True)

    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    prompts = relationship("Prompt", back_populates="author")
    reviews = relationship("Review", back_populates="user")
