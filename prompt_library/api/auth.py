from fastapi import APIRouter, Depends

from prompt_library import serializers
from prompt_library.api.deps import get_activity, get_auth_service, get_current_user, get_request_meta
from prompt_library.models import User
from prompt_library.schemas import (
    AuthResponse,
    CurrentUserResponse,
    SigninRequest,
    SignupRequest,
    TokenResponse,
    VerificationRequest,
    VerificationSentResponse,
    VerifyCodeRequest,
)
from prompt_library.services import ActivityService, AuthService, RequestMeta

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/signup", response_model=AuthResponse, status_code=201)
def signup(
    body: SignupRequest,
    auth: AuthService = Depends(get_auth_service),
    activity: ActivityService = Depends(get_activity),
    meta: RequestMeta = Depends(get_request_meta),
):
    """Sign up with email and password."""
    user = auth.create_user(body.email, body.password, body.name)
    token = auth.generate_token(user)
    activity.log_user_signup(user.id, "email", meta)
    return AuthResponse(token=token, user=serializers.user_response(user))


@router.post("/signin", response_model=AuthResponse)
def signin(
    body: SigninRequest,
    auth: AuthService = Depends(get_auth_service),
    activity: ActivityService = Depends(get_activity),
    meta: RequestMeta = Depends(get_request_meta),
):
    """Sign in with email and password."""
    user = auth.authenticate_user(body.email, body.password)
    token = auth.generate_token(user)
    activity.log_user_signin(user.id, "email", meta)
    return AuthResponse(token=token, user=serializers.user_response(user))


@router.post("/send-verification", response_model=VerificationSentResponse)
def send_verification(body: VerificationRequest, auth: AuthService = Depends(get_auth_service)):
    auth.send_verification_code(body.email)
    return VerificationSentResponse(message="Verification code sent")


@router.post("/verify-code", response_model=AuthResponse)
def verify_code(
    body: VerifyCodeRequest,
    auth: AuthService = Depends(get_auth_service),
    activity: ActivityService = Depends(get_activity),
    meta: RequestMeta = Depends(get_request_meta),
):
    """Exchange a verification code for a token."""
    user = auth.verify_code(body.email, body.code)
    token = auth.generate_token(user)
    activity.log_user_signin(user.id, "verification_code", meta)
    return AuthResponse(token=token, user=serializers.user_response(user))


@router.get("/me", response_model=CurrentUserResponse)
def me(user: User = Depends(get_current_user)):
    return CurrentUserResponse(user=serializers.user_response(user))


@router.post("/refresh", response_model=TokenResponse)
def refresh(user: User = Depends(get_current_user), auth: AuthService = Depends(get_auth_service)):
    return TokenResponse(token=auth.generate_token(user))
