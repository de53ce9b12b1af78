# schemas/activity.py
from pydantic import BaseModel, Field, ConfigDict
from typing import Optional

from perception_survey.data.activity_catalog import DEFAULT_PILLAR


# =====================================================================
# ACTIVITY SCHEMAS
# =====================================================================

class Activity(BaseModel):
    """One rateable catalog item belonging to exactly one pillar."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    pillar: int
    pillar_name: str
    name: str
    description: str


class ActivityCreate(BaseModel):
    """Admin request to add an activity to the catalog."""

    pillar: int = Field(default=int(DEFAULT_PILLAR), ge=1)
    name: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1, max_length=2000)

    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "pillar": 1,
                "name": "Weekly Market Reports",
                "description": "A short weekly summary of listings and sales",
            }
        }
    )


class ActivityUpdate(BaseModel):
    """Admin request to edit an activity. Only provided fields change."""

    pillar: Optional[int] = Field(None, ge=1)
    name: Optional[str] = Field(None, min_length=1, max_length=255)
    description: Optional[str] = Field(None, min_length=1, max_length=2000)
