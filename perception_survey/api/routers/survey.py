# perception_survey/api/routers/survey.py
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, Request
from fastapi.responses import Response

from perception_survey.api.deps import client_details, get_store, get_user_id, set_user_cookie
from perception_survey.schemas.activity import Activity
from perception_survey.schemas.survey import (
    ActivityRating,
    Rating,
    RatingChangeResult,
    RatingToggle,
    RatingUpdate,
    SessionOut,
    SurveyStats,
    SurveyView,
)
from perception_survey.services.survey import survey_service
from perception_survey.storage.base import SurveyStore

router = APIRouter(prefix="/survey", tags=["Survey"])


# =====================================================================
# SURVEY PAGE
# =====================================================================


@router.get("", response_model=SurveyView, summary="Get my survey")
def get_survey(
    user_id: str = Depends(get_user_id),
    store: SurveyStore = Depends(get_store),
):
    """
    Everything the survey page shows for the current client.

    - Visible activities grouped by pillar with their ratings and comments
    - Per-pillar completion counts
    - Stats and completion flag
    - Loved activities, once every visible activity is rated
    """
    return survey_service.get_view(store, user_id)


@router.get("/activities", response_model=List[Activity], summary="Get my activities")
def get_activities(
    user_id: str = Depends(get_user_id),
    store: SurveyStore = Depends(get_store),
):
    """Activities visible to the current client, in catalog order."""
    return survey_service.get_activities(store, user_id)


@router.get("/stats", response_model=SurveyStats, summary="Get my progress")
def get_stats(
    user_id: str = Depends(get_user_id),
    store: SurveyStore = Depends(get_store),
):
    stats, _ = survey_service.get_stats(store, user_id)
    return stats


@router.get("/session", response_model=SessionOut, summary="Get my survey session")
def get_session(
    user_id: str = Depends(get_user_id),
    store: SurveyStore = Depends(get_store),
):
    return survey_service.get_session(store, user_id)


# =====================================================================
# RATINGS
# =====================================================================


@router.get("/ratings", response_model=Dict[int, Optional[Rating]], summary="Get my ratings")
def get_ratings(
    user_id: str = Depends(get_user_id),
    store: SurveyStore = Depends(get_store),
):
    """Activity id -> rating for every visible activity; null when unrated."""
    return survey_service.load_ratings(store, user_id)


@router.get("/ratings/{activity_id}", response_model=ActivityRating, summary="Get one rating")
def get_rating(
    activity_id: int,
    user_id: str = Depends(get_user_id),
    store: SurveyStore = Depends(get_store),
):
    return survey_service.get_rating(store, user_id, activity_id)


@router.put("/ratings/{activity_id}", response_model=RatingChangeResult, summary="Rate an activity")
def set_rating(
    activity_id: int,
    payload: RatingUpdate,
    request: Request,
    user_id: str = Depends(get_user_id),
    store: SurveyStore = Depends(get_store),
):
    """
    Set the rating (and optional comment) of an activity.

    A null rating clears it. Leaving out `comment` keeps the stored one.
    """
    return survey_service.set_rating(
        store,
        user_id,
        activity_id,
        payload.rating,
        payload.comment,
        keep_comment="comment" not in payload.model_fields_set,
        **client_details(request),
    )


@router.post(
    "/ratings/{activity_id}/toggle",
    response_model=RatingChangeResult,
    summary="Press a rating button",
)
def toggle_rating(
    activity_id: int,
    payload: RatingToggle,
    request: Request,
    user_id: str = Depends(get_user_id),
    store: SurveyStore = Depends(get_store),
):
    """Set the rating, or clear it when it is already the current one."""
    return survey_service.toggle_rating(
        store, user_id, activity_id, payload.rating, **client_details(request)
    )


@router.delete("/ratings/{activity_id}", response_model=RatingChangeResult, summary="Clear a rating")
def clear_rating(
    activity_id: int,
    user_id: str = Depends(get_user_id),
    store: SurveyStore = Depends(get_store),
):
    return survey_service.set_rating(store, user_id, activity_id, None)


@router.delete("/responses", response_model=SurveyView, summary="Reset my survey")
def reset_survey(
    user_id: str = Depends(get_user_id),
    store: SurveyStore = Depends(get_store),
):
    """Delete all of the current client's ratings."""
    return survey_service.reset(store, user_id)


# =====================================================================
# EXPORT
# =====================================================================


@router.get("/export", summary="Download my responses as CSV")
def export_survey(
    user_id: str = Depends(get_user_id),
    store: SurveyStore = Depends(get_store),
):
    filename, content = survey_service.export_csv(store, user_id)
    response = Response(
        content=content,
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{filename}"'},
    )
    set_user_cookie(response, user_id)
    return response
