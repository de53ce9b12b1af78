# schemas/survey.py
from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from enum import Enum

from perception_survey.schemas.activity import Activity


# =====================================================================
# ENUMS
# =====================================================================

class Rating(str, Enum):
    """A client's valuation of an activity. Absent ratings are None."""

    love = "love"
    neutral = "neutral"
    hate = "hate"


# =====================================================================
# REQUEST SCHEMAS
# =====================================================================

class RatingUpdate(BaseModel):
    """Set a rating. A null rating clears the stored response."""

    rating: Optional[Rating] = None
    comment: Optional[str] = Field(None, max_length=2000)


class RatingToggle(BaseModel):
    """Press a rating button: pressing the current rating clears it."""

    rating: Rating


# =====================================================================
# RESPONSE SCHEMAS
# =====================================================================

class SurveyStats(BaseModel):
    love: int = 0
    neutral: int = 0
    hate: int = 0
    total_rated: int = 0
    progress: int = 0


class ActivityRating(BaseModel):
    activity_id: int
    rating: Optional[Rating] = None
    comment: Optional[str] = None
    rated_at: Optional[datetime] = None


class RatedActivity(Activity):
    rating: Optional[Rating] = None
    comment: Optional[str] = None


class PillarSection(BaseModel):
    """Activities of one pillar with its completion count."""

    pillar: int
    pillar_name: str
    rated_count: int
    total: int
    activities: List[RatedActivity]


class SurveyView(BaseModel):
    """Everything the survey page renders for one client."""

    user_id: str
    stats: SurveyStats
    is_complete: bool
    pillars: List[PillarSection]
    loved_activities: List[Activity] = []


class RatingChangeResult(BaseModel):
    activity_id: int
    rating: Optional[Rating] = None
    comment: Optional[str] = None
    stats: SurveyStats
    is_complete: bool


class SessionOut(BaseModel):
    id: str
    user_id: str
    started_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
