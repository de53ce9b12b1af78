# =====================================================================
# services/export.py - CSV rendering of survey responses
# =====================================================================

import csv
import io
from datetime import date, datetime
from typing import Iterable, List, Mapping, Optional, Sequence

from perception_survey.schemas.activity import Activity
from perception_survey.storage.base import StoredResponse


SURVEY_EXPORT_HEADER = ["Service Category", "Service Name", "Client Rating", "Timestamp"]
ALL_RESPONSES_HEADER = ["User ID", "Activity ID", "Activity Name", "Rating", "Comment", "Timestamp"]

NOT_RATED = "Not Rated"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"


def _format_timestamp(value: Optional[datetime]) -> str:
    return value.strftime(TIMESTAMP_FORMAT) if value else ""


def _render(header: List[str], rows: Iterable[List[str]]) -> str:
    """Unquoted header line, then every field of every row quoted."""
    buffer = io.StringIO()
    csv.writer(buffer, lineterminator="\n").writerow(header)
    csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n").writerows(rows)
    return buffer.getvalue()


def export_filename(prefix: str, day: Optional[date] = None) -> str:
    day = day or date.today()
    return f"{prefix}-{day.isoformat()}.csv"


def survey_csv(
    visible: Sequence[Activity],
    responses: Mapping[int, Optional[StoredResponse]],
) -> str:
    """One row per visible activity, in visible order."""
    rows = []
    for activity in visible:
        response = responses.get(activity.id)
        rows.append(
            [
                activity.pillar_name,
                activity.name,
                response.rating.value if response else NOT_RATED,
                _format_timestamp(response.timestamp) if response else "",
            ]
        )
    return _render(SURVEY_EXPORT_HEADER, rows)


def all_responses_csv(
    responses: Iterable[StoredResponse], activities: Sequence[Activity]
) -> str:
    """Every stored response of every client."""
    names = {activity.id: activity.name for activity in activities}
    rows = [
        [
            response.user_id,
            str(response.activity_id),
            names.get(response.activity_id, "Unknown"),
            response.rating.value,
            response.comment or "",
            response.timestamp.isoformat() if response.timestamp else "",
        ]
        for response in responses
    ]
    return _render(ALL_RESPONSES_HEADER, rows)
