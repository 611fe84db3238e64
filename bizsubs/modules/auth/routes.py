from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import RedirectResponse
from urllib.parse import quote
from bizsubs.config.settings import settings
from bizsubs.database.supabase_client import get_supabase
from bizsubs.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
from bizsubs.modules.auth.service import AuthService
from bizsubs.modules.users.service import UserService
from bizsubs.core.dependencies import get_auth_service, get_current_token, get_current_user
from supabase import Client
from typing import Dict, Optional

router = APIRouter(prefix="/auth", tags=["auth"])


def _frontend_redirect(path: str) -> RedirectResponse:
    return RedirectResponse(url=f"{settings.frontend_url.rstrip('/')}{path}", status_code=303)


@router.post("/register", response_model=RegisterResponse, status_code=201)
def register(
    register_data: RegisterRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Register a new user"""
    return service.register(register_data)


@router.post("/login", response_model=TokenResponse)
def login(
    login_data: LoginRequest,
    service: AuthService = Depends(get_auth_service)
):
    """Login and get access token"""
    return service.login(login_data)


@router.post("/logout", status_code=200)
def logout(
    token: str = Depends(get_current_token),
    service: AuthService = Depends(get_auth_service)
):
    """Logout and invalidate token"""
    service.logout(token)
    return {"message": "Logged out successfully"}


@router.get("/me")
def get_me(current_user: Dict = Depends(get_current_user)):
    """Get current authenticated user"""
    return current_user


@router.get("/confirm")
def confirm_email(
    token_hash: Optional[str] = None,
    type: Optional[str] = None,
    next: str = "/",
    service: AuthService = Depends(get_auth_service),
    supabase: Client = Depends(get_supabase)
):
    """Email confirmation link target; redirects to onboarding or the dashboard"""
    if not next.startswith("/") or next.startswith("//"):
        next = "/"
    if not token_hash or not type:
        return _frontend_redirect(f"/auth/error?error={quote('No token hash or type')}")
    try:
        user = service.verify_email_otp(token_hash, type)
    except HTTPException as e:
        return _frontend_redirect(f"/auth/error?error={quote(str(e.detail))}")

    if not user:
        return _frontend_redirect(next)

    status = UserService(supabase).get_onboarding_status(user["id"])
    if not status.is_complete:
        return _frontend_redirect(status.redirect_to)
    return _frontend_redirect("/dashboard" if next == "/" else next)
