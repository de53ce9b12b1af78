# perception_survey/schemas/__init__.py

from .activity import Activity, ActivityCreate, ActivityUpdate
from .survey import (
    Rating,
    RatingUpdate,
    RatingToggle,
    SurveyStats,
    ActivityRating,
    RatedActivity,
    PillarSection,
    SurveyView,
    RatingChangeResult,
    SessionOut,
)
from .admin import (
    AdminLoginRequest,
    TokenResponse,
    TopService,
    ClientSummary,
    ClientsOverview,
    RatingAnalytics,
    ActivityAnalytics,
    AnalyticsOut,
    VisibilityUpdate,
    ActivityVisibility,
    ClientVisibilityOut,
    VisibilitySettingsOut,
)


__all__ = [
    # Activities
    "Activity", "ActivityCreate", "ActivityUpdate",

    # Survey
    "Rating", "RatingUpdate", "RatingToggle", "SurveyStats", "ActivityRating",
    "RatedActivity", "PillarSection", "SurveyView", "RatingChangeResult",
    "SessionOut",

    # Admin
    "AdminLoginRequest", "TokenResponse", "TopService", "ClientSummary",
    "ClientsOverview", "RatingAnalytics", "ActivityAnalytics", "AnalyticsOut",
    "VisibilityUpdate", "ActivityVisibility", "ClientVisibilityOut",
    "VisibilitySettingsOut",
]
