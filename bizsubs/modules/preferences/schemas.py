from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional, Literal
from datetime import datetime

DateFormat = Literal["US", "EU", "ISO"]

DEFAULT_SUBSCRIPTION_COLUMNS = ["service_name", "cost", "billing_cycle", "next_billing_date", "client_name"]
DEFAULT_LTD_COLUMNS = ["service_name", "original_cost", "purchase_date", "client_name"]


class PreferencesUpdate(BaseModel):
    date_format_preference: Optional[DateFormat] = None
    visible_subscription_columns: Optional[List[str]] = None
    visible_ltd_columns: Optional[List[str]] = None
    default_filters: Optional[Dict[str, Any]] = None
    dashboard_layout: Optional[Dict[str, Any]] = None


class PreferencesResponse(BaseModel):
    id: Optional[str] = None  # None until the first save
    user_id: str
    date_format_preference: DateFormat = "US"
    visible_subscription_columns: List[str] = Field(default_factory=lambda: list(DEFAULT_SUBSCRIPTION_COLUMNS))
    visible_ltd_columns: List[str] = Field(default_factory=lambda: list(DEFAULT_LTD_COLUMNS))
    default_filters: Dict[str, Any] = Field(default_factory=dict)
    dashboard_layout: Dict[str, Any] = Field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    class Config:
        from_attributes = True
