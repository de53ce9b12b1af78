# schemas/admin.py
from pydantic import BaseModel, Field
from typing import Optional, List, Dict
from datetime import datetime

from perception_survey.schemas.activity import Activity
from perception_survey.schemas.survey import Rating


# =====================================================================
# AUTH SCHEMAS
# =====================================================================

class AdminLoginRequest(BaseModel):
    """Admin dashboard login request."""
    password: str = Field(..., min_length=1)


class TokenResponse(BaseModel):
    """Authentication token response."""
    access_token: str
    token_type: str = "bearer"


# =====================================================================
# CLIENT RESPONSE SCHEMAS
# =====================================================================

class TopService(BaseModel):
    activity_id: int
    activity_name: str
    rating: Rating


class ClientSummary(BaseModel):
    user_id: str
    total_responses: int
    response_percentage: int
    completed_at: Optional[datetime] = None
    top_services: List[TopService] = []


class ClientsOverview(BaseModel):
    total_clients: int
    completed: int
    in_progress: int
    catalog_size: int
    clients: List[ClientSummary]


# =====================================================================
# ANALYTICS SCHEMAS
# =====================================================================

class RatingAnalytics(BaseModel):
    """Responses for one (activity, rating) pair across all clients."""

    activity_id: int
    rating: Rating
    response_count: int
    percentage: float


class ActivityAnalytics(BaseModel):
    activity_id: int
    activity_name: str
    total_responses: int
    ratings: Dict[Rating, RatingAnalytics]


class AnalyticsOut(BaseModel):
    rows: List[RatingAnalytics]
    activities: List[ActivityAnalytics]


# =====================================================================
# VISIBILITY SCHEMAS
# =====================================================================

class VisibilityUpdate(BaseModel):
    hidden: bool


class ActivityVisibility(Activity):
    hidden: bool
    # "client", "default" or None when no override applies
    source: Optional[str] = None


class ClientVisibilityOut(BaseModel):
    client_id: str
    visible_count: int
    total: int
    activities: List[ActivityVisibility]


class VisibilitySettingsOut(BaseModel):
    """client_id -> activity_id -> hidden"""
    settings: Dict[str, Dict[int, bool]]
