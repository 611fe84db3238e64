from fastapi import APIRouter, Depends
from bizsubs.database.supabase_client import get_supabase
from bizsubs.modules.users.schemas import (
    UserProfileUpdate, UserProfileResponse, OnboardingStatusResponse,
    OnboardingProfileRequest, OnboardingWorkspaceRequest
)
from bizsubs.modules.users.service import UserService
from bizsubs.modules.activity.service import ActivityService
from bizsubs.core.dependencies import get_current_user, get_activity_service
from supabase import Client
from typing import Dict

router = APIRouter(prefix="/users", tags=["users"])


def get_user_service(supabase: Client = Depends(get_supabase)) -> UserService:
    return UserService(supabase)


@router.get("/me", response_model=UserProfileResponse)
def get_my_profile(
    current_user: Dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    """Get the current user's business profile"""
    return service.get_profile(current_user["id"])


@router.put("/me", response_model=UserProfileResponse)
def update_my_profile(
    profile_data: UserProfileUpdate,
    current_user: Dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    """Update profile, currency, financial year end and default tax rate"""
    return service.update_profile(current_user["id"], profile_data)


@router.get("/me/onboarding", response_model=OnboardingStatusResponse)
def get_onboarding_status(
    current_user: Dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    """Which onboarding step the user should see next"""
    return service.get_onboarding_status(current_user["id"])


@router.post("/me/onboarding/profile", response_model=UserProfileResponse)
def complete_profile_step(
    profile_data: OnboardingProfileRequest,
    current_user: Dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service)
):
    """Onboarding step 1: first and last name"""
    return service.complete_profile_step(current_user, profile_data)


@router.post("/me/onboarding/workspace", response_model=UserProfileResponse)
def complete_workspace_step(
    workspace_data: OnboardingWorkspaceRequest,
    current_user: Dict = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
    activity: ActivityService = Depends(get_activity_service)
):
    """Onboarding step 2: workspace name and default tax rate"""
    return service.complete_workspace_step(current_user, workspace_data, activity)
