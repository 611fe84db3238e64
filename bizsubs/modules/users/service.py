from supabase import Client
from bizsubs.config.settings import settings
from bizsubs.core.cache import QueryCache, get_query_cache
from bizsubs.modules.users.schemas import (
    UserProfileUpdate, UserProfileResponse, OnboardingStatusResponse,
    OnboardingProfileRequest, OnboardingWorkspaceRequest
)
from bizsubs.modules.activity.service import ActivityService
from typing import Dict, Optional, Any
from fastapi import HTTPException
from datetime import datetime, timedelta, timezone
import logging

logger = logging.getLogger(__name__)

PROFILE_STEP = "/onboarding/profile"
WORKSPACE_STEP = "/onboarding/workspace"
DASHBOARD = "/dashboard"


def onboarding_status(profile: Optional[Dict[str, Any]]) -> OnboardingStatusResponse:
    """Profile needs first and last name; workspace needs a company name."""
    if not profile:
        return OnboardingStatusResponse(
            is_complete=False, needs_profile=True, needs_workspace=True, redirect_to=PROFILE_STEP
        )
    needs_profile = not profile.get("first_name") or not profile.get("last_name")
    needs_workspace = not profile.get("company_name")
    if needs_profile:
        redirect_to = PROFILE_STEP
    elif needs_workspace:
        redirect_to = WORKSPACE_STEP
    else:
        redirect_to = DASHBOARD
    return OnboardingStatusResponse(
        is_complete=not needs_profile and not needs_workspace,
        needs_profile=needs_profile,
        needs_workspace=needs_workspace,
        redirect_to=redirect_to,
    )


def trial_days_remaining(profile: Dict[str, Any], now: Optional[datetime] = None) -> Optional[int]:
    """Whole days left on a trial, None when the user is not on one."""
    if profile.get("subscription_tier") != "trial" or not profile.get("trial_ends_at"):
        return None
    ends_at = profile["trial_ends_at"]
    if isinstance(ends_at, str):
        ends_at = datetime.fromisoformat(ends_at.replace("Z", "+00:00"))
    if ends_at.tzinfo is None:
        ends_at = ends_at.replace(tzinfo=timezone.utc)
    now = now or datetime.now(timezone.utc)
    return max(0, (ends_at - now).days)


class UserService:
    def __init__(self, supabase: Client, cache: Optional[QueryCache] = None):
        self.supabase = supabase
        self.cache = cache or get_query_cache()

    def get_profile_row(self, user_id: str) -> Optional[Dict[str, Any]]:
        """Raw profile row, or None when onboarding has not created it yet"""
        try:
            result = self.supabase.table("users")\
                .select("*")\
                .eq("id", user_id)\
                .maybe_single()\
                .execute()
            return result.data if result and result.data else None
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_profile(self, user_id: str) -> UserProfileResponse:
        """Get the business profile of a user"""
        profile = self.get_profile_row(user_id)
        if not profile:
            raise HTTPException(status_code=404, detail="User profile not found")
        return UserProfileResponse(**profile, trial_days_remaining=trial_days_remaining(profile))

    def get_tax_defaults(self, user_id: str) -> Dict[str, Any]:
        """Tax rate, financial year end, currency and date format used by reports"""
        profile = self.get_profile_row(user_id) or {}
        tax_rate = profile.get("tax_rate")
        return {
            "id": user_id,
            "tax_rate": float(tax_rate) if tax_rate is not None else settings.default_tax_rate,
            "financial_year_end": profile.get("financial_year_end") or settings.default_financial_year_end,
            "currency_preference": profile.get("currency_preference") or settings.default_currency,
        }

    def update_profile(self, user_id: str, profile_data: UserProfileUpdate) -> UserProfileResponse:
        """Update profile and workspace settings"""
        try:
            update_data = profile_data.model_dump(exclude_none=True)
            if not update_data:
                return self.get_profile(user_id)
            update_data["updated_at"] = datetime.now(timezone.utc).isoformat()

            result = self.supabase.table("users")\
                .update(update_data)\
                .eq("id", user_id)\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="User profile not found")

            self.cache.invalidate_after_change(user_id, "profile")
            profile = result.data[0]
            return UserProfileResponse(**profile, trial_days_remaining=trial_days_remaining(profile))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def get_onboarding_status(self, user_id: str) -> OnboardingStatusResponse:
        try:
            return onboarding_status(self.get_profile_row(user_id))
        except Exception as e:
            # Treat an unreadable profile as not onboarded
            logger.error(f"Error checking onboarding status for {user_id}: {e}")
            return onboarding_status(None)

    def complete_profile_step(self, user: Dict, profile_data: OnboardingProfileRequest) -> UserProfileResponse:
        """Save names; a new profile row starts a trial"""
        try:
            existing = self.get_profile_row(user["id"])
            now = datetime.now(timezone.utc)
            row = {
                "id": user["id"],
                "email": user.get("email") or "",
                "first_name": profile_data.first_name,
                "last_name": profile_data.last_name,
                "updated_at": now.isoformat(),
            }
            if not existing:
                row["subscription_tier"] = "trial"
                row["trial_ends_at"] = (now + timedelta(days=settings.trial_days)).isoformat()

            result = self.supabase.table("users").upsert(row, on_conflict="id").execute()
            if not result.data:
                raise HTTPException(status_code=500, detail="Failed to save profile")

            profile = result.data[0]
            return UserProfileResponse(**profile, trial_days_remaining=trial_days_remaining(profile))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))

    def complete_workspace_step(
        self,
        user: Dict,
        workspace_data: OnboardingWorkspaceRequest,
        activity: ActivityService,
    ) -> UserProfileResponse:
        """Save the workspace name and default tax rate"""
        try:
            result = self.supabase.table("users")\
                .update({
                    "company_name": workspace_data.company_name,
                    "tax_rate": workspace_data.tax_rate,
                    "updated_at": datetime.now(timezone.utc).isoformat(),
                })\
                .eq("id", user["id"])\
                .execute()

            if not result.data:
                raise HTTPException(status_code=404, detail="Complete your profile before creating a workspace")

            activity.log_activity(
                user, "create", "workspace", None, f"Created workspace: {workspace_data.company_name}"
            )
            self.cache.invalidate_after_change(user["id"], "profile")
            profile = result.data[0]
            return UserProfileResponse(**profile, trial_days_remaining=trial_days_remaining(profile))
        except HTTPException:
            raise
        except Exception as e:
            raise HTTPException(status_code=500, detail=str(e))
