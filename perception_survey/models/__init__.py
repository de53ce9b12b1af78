# perception_survey/models/__init__.py

from perception_survey.core.config import Base

# Import all models here so metadata.create_all sees every table
from .survey_response import SurveyResponse
from .survey_session import SurveySession
from .custom_activity import CustomActivity
from .client_visibility import ClientActivityVisibility

__all__ = [
    "Base",
    "SurveyResponse",
    "SurveySession",
    "CustomActivity",
    "ClientActivityVisibility",
]
