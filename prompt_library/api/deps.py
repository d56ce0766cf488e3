from typing import Optional

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.orm import Session

from prompt_library.config import Settings
from prompt_library.database import get_db
from prompt_library.errors import AuthError
from prompt_library.models import User
from prompt_library.services import (
    ActivityService,
    AuthService,
    CategoryRegistry,
    CommentService,
    PromptCatalog,
    RequestMeta,
    StatsService,
)

bearer_scheme = HTTPBearer(auto_error=False)


def get_settings(request: Request) -> Settings:
    return request.app.state.settings


def get_activity(request: Request) -> ActivityService:
    return request.app.state.activity


def get_request_meta(request: Request) -> RequestMeta:
    return RequestMeta(
        ip_address=request.client.host if request.client else None,
        user_agent=request.headers.get("user-agent"),
    )


def get_auth_service(db: Session = Depends(get_db), settings: Settings = Depends(get_settings)) -> AuthService:
    return AuthService(db, settings)


def get_catalog(db: Session = Depends(get_db), activity: ActivityService = Depends(get_activity)) -> PromptCatalog:
    return PromptCatalog(db, activity)


def get_category_registry(db: Session = Depends(get_db)) -> CategoryRegistry:
    return CategoryRegistry(db)


def get_comment_service(db: Session = Depends(get_db)) -> CommentService:
    return CommentService(db)


def get_stats_service(db: Session = Depends(get_db), activity: ActivityService = Depends(get_activity)) -> StatsService:
    return StatsService(db, activity)


def get_optional_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> Optional[User]:
    """The caller's user if a valid bearer token was sent, otherwise None."""
    if credentials is None:
        return None
    try:
        return auth.authenticate_token(credentials.credentials)
    except AuthError:
        return None


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
    auth: AuthService = Depends(get_auth_service),
) -> User:
    if credentials is None:
        raise AuthError("Authentication required")
    return auth.authenticate_token(credentials.credentials)
