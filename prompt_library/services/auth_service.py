"""
Identity & access - accounts, password checks, verification codes and JWTs.
"""

import logging
import secrets
from datetime import datetime, timedelta, timezone
from typing import Any, Dict, Optional

from jose import JWTError, jwt
from passlib.context import CryptContext
from sqlalchemy.orm import Session

from prompt_library.config import Settings
from prompt_library.errors import AuthError, ConflictError, NotFoundError, ValidationError
from prompt_library.models import User

logger = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["bcrypt"], deprecated="auto")

MIN_PASSWORD_LENGTH = 6
VERIFICATION_CODE_TTL = timedelta(minutes=10)
TEMPORARY_USER_NAME = "Temporary User"


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(password: str, password_hash: str) -> bool:
    return pwd_context.verify(password, password_hash)


def generate_verification_code() -> str:
    """Six uppercase hex characters."""
    return secrets.token_hex(3).upper()


class AuthService:
    def __init__(self, db: Session, settings: Settings):
        self.db = db
        self.settings = settings

    # Tokens

    def generate_token(self, user: User) -> str:
        expire = datetime.now(timezone.utc) + timedelta(days=self.settings.jwt_expire_days)
        claims = {"sub": user.id, "email": user.email, "name": user.name, "exp": expire}
        return jwt.encode(claims, self.settings.jwt_secret, algorithm=self.settings.jwt_algorithm)

    def verify_token(self, token: str) -> Dict[str, Any]:
        try:
            payload = jwt.decode(token, self.settings.jwt_secret, algorithms=[self.settings.jwt_algorithm])
        except JWTError:
            raise AuthError("Invalid or expired token")
        if not payload.get("sub"):
            raise AuthError("Invalid or expired token")
        return payload

    def authenticate_token(self, token: str) -> User:
        """Resolve a bearer token to its user or reject it."""
        payload = self.verify_token(token)
        user = self.db.query(User).filter(User.id == payload["sub"]).first()
        if not user:
            raise AuthError("Invalid or expired token")
        return user

    # Accounts

    def create_user(self, email: Optional[str], password: Optional[str], name: Optional[str]) -> User:
        if not email or not password or not name:
            raise ValidationError("Email, password, and name are required")
        if "@" not in email:
            raise ValidationError("A valid email address is required")
        if len(password) < MIN_PASSWORD_LENGTH:
            raise ValidationError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")

        if self.db.query(User).filter(User.email == email).first():
            raise ConflictError("User already exists with this email")

        user = User(email=email, name=name, password_hash=hash_password(password), provider="email")
        self.db.add(user)
        self.db.commit()
        self.db.refresh(user)
        logger.info(f"Created user {user.id}")
        return user

    def authenticate_user(self, email: Optional[str], password: Optional[str]) -> User:
        if not email or not password:
            raise ValidationError("Email and password are required")

        user = self.db.query(User).filter(User.email == email).first()
        if not user or not user.password_hash:
            raise AuthError("Invalid credentials")
        if not verify_password(password, user.password_hash):
            raise AuthError("Invalid credentials")
        return user

    def get_user_by_id(self, user_id: str) -> User:
        user = self.db.query(User).filter(User.id == user_id).first()
        if not user:
            raise NotFoundError("User not found")
        return user

    # Verification codes

    def send_verification_code(self, email: Optional[str]) -> str:
        """
        Issue a verification code for an email, creating a placeholder user if needed.

        Delivery is not wired up; the code is written to the log.

        Returns:
            The issued code
        """
        if not email:
            raise ValidationError("Email is required")

        code = generate_verification_code()
        expiry = datetime.utcnow() + VERIFICATION_CODE_TTL

        user = self.db.query(User).filter(User.email == email).first()
        if not user:
            user = User(email=email, name=TEMPORARY_USER_NAME, provider="email")
            self.db.add(user)
        user.verification_code = code
        user.verification_expiry = expiry
        self.db.commit()

        logger.info(f"Verification code for {email}: {code}")
        return code

    def verify_code(self, email: Optional[str], code: Optional[str]) -> User:
        if not email or not code:
            raise ValidationError("Email and verification code are required")

        user = self.db.query(User).filter(User.email == email).first()
        if not user or not user.verification_code or not user.verification_expiry:
            raise AuthError("Invalid verification request")
        if datetime.utcnow() > user.verification_expiry:
            raise AuthError("Verification code expired")
        if user.verification_code != code.strip().upper():
            raise AuthError("Invalid verification code")

        user.verified = True
        user.verification_code = None
        user.verification_expiry = None
        self.db.commit()
        self.db.refresh(user)
        return user
