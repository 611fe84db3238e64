"""
Core dependencies for route protection and per-request services
"""

from fastapi import Depends, Security
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from bizsubs.database.supabase_client import get_supabase, get_auth_client
from bizsubs.modules.auth.service import AuthService
from bizsubs.modules.activity.service import ActivityService
from supabase import Client
from typing import Dict, Any

security = HTTPBearer()


def get_auth_service(supabase: Client = Depends(get_auth_client)) -> AuthService:
    return AuthService(supabase)


def get_current_token(
    credentials: HTTPAuthorizationCredentials = Security(security)
) -> str:
    """Extract JWT token from Authorization header"""
    return credentials.credentials


def get_current_user(
    token: str = Depends(get_current_token),
    auth_service: AuthService = Depends(get_auth_service)
) -> Dict[str, Any]:
    """Resolve the authenticated user from the bearer token"""
    return auth_service.get_current_user(token)


def get_activity_service(supabase: Client = Depends(get_supabase)) -> ActivityService:
    return ActivityService(supabase)
