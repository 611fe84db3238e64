import hashlib
import logging
from supabase import Client
from bizsubs.config.settings import settings
from bizsubs.core.cache import QueryCache
from bizsubs.modules.auth.schemas import LoginRequest, RegisterRequest, TokenResponse, RegisterResponse
from fastapi import HTTPException
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

# Verified tokens, so parallel dashboard requests hit Supabase Auth once
token_cache = QueryCache(ttl_seconds=60, max_entries=500)


def clear_auth_cache():
    token_cache.clear()


def _token_key(token: str) -> tuple:
    return ("token", hashlib.sha256(token.encode()).hexdigest())


def _user_payload(user) -> Dict[str, Any]:
    return {
        "id": user.id,
        "email": user.email,
        "user_metadata": user.user_metadata or {},
        "created_at": user.created_at,
    }


class AuthService:
    def __init__(self, supabase: Client):
        self.supabase = supabase

    def register(self, register_data: RegisterRequest) -> RegisterResponse:
        """Sign up; the confirmation email links back to /auth/confirm"""
        metadata = {
            key: value for key, value in (
                ("first_name", register_data.first_name),
                ("last_name", register_data.last_name),
            ) if value
        }
        try:
            auth_response = self.supabase.auth.sign_up({
                "email": register_data.email,
                "password": register_data.password,
                "options": {
                    "data": metadata,
                    "email_redirect_to": f"{settings.frontend_url.rstrip('/')}/auth/confirm",
                },
            })
        except Exception as e:
            message = str(e).lower()
            if "already registered" in message or "already exists" in message:
                raise HTTPException(status_code=400, detail="User already exists")
            logger.error(f"Sign up failed for {register_data.email}: {e}")
            raise HTTPException(status_code=500, detail=f"Registration failed: {e}")

        if not auth_response.user:
            raise HTTPException(status_code=400, detail="Failed to register user")
        logger.info(f"Registered {register_data.email}, awaiting email confirmation")
        return RegisterResponse(
            user_id=auth_response.user.id,
            email=auth_response.user.email or register_data.email,
            message="Check your email to confirm your account.",
        )

    def login(self, login_data: LoginRequest) -> TokenResponse:
        """Password sign in"""
        try:
            auth_response = self.supabase.auth.sign_in_with_password({
                "email": login_data.email,
                "password": login_data.password,
            })
        except Exception as e:
            message = str(e).lower()
            if "invalid" in message or "credentials" in message or "not confirmed" in message:
                raise HTTPException(status_code=401, detail="Invalid email or password")
            raise HTTPException(status_code=500, detail=f"Login failed: {e}")

        if not auth_response.user or not auth_response.session:
            raise HTTPException(status_code=401, detail="Invalid credentials")
        return TokenResponse(
            access_token=auth_response.session.access_token,
            user_id=auth_response.user.id,
            email=auth_response.user.email or login_data.email,
        )

    def get_current_user(self, token: str) -> Dict[str, Any]:
        """Resolve a bearer token to the signed-in user"""
        key = _token_key(token)
        cached = token_cache.get(key)
        if cached is not None:
            return cached
        try:
            user_response = self.supabase.auth.get_user(jwt=token)
        except Exception as e:
            logger.debug(f"Token rejected: {e}")
            raise HTTPException(status_code=401, detail="Invalid or expired token")

        if not user_response or not user_response.user:
            raise HTTPException(status_code=401, detail="Invalid or expired token")
        user = _user_payload(user_response.user)
        token_cache.set(key, user)
        return user

    def logout(self, token: str) -> bool:
        token_cache.invalidate(_token_key(token))
        try:
            self.supabase.auth.sign_out()
            return True
        except Exception as e:
            # The JWT still expires on its own
            logger.warning(f"Supabase sign_out failed: {e}")
            return False

    def verify_email_otp(self, token_hash: str, otp_type: str) -> Optional[Dict[str, Any]]:
        """Exchange an email confirmation token; None when Supabase returns no user"""
        try:
            response = self.supabase.auth.verify_otp({"token_hash": token_hash, "type": otp_type})
        except Exception as e:
            raise HTTPException(status_code=400, detail=str(e))
        user = getattr(response, "user", None)
        return _user_payload(user) if user is not None else None
