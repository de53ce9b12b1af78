# =====================================================================
# services/stats.py - pure aggregation over ratings and responses
# =====================================================================

import math
from collections import OrderedDict, defaultdict
from typing import Dict, Iterable, List, Mapping, Optional, Sequence

from perception_survey.schemas.activity import Activity
from perception_survey.schemas.admin import ActivityAnalytics, AnalyticsOut, RatingAnalytics
from perception_survey.schemas.survey import (
    PillarSection,
    RatedActivity,
    Rating,
    SurveyStats,
)
from perception_survey.storage.base import StoredResponse


def round_half_up(value: float) -> int:
    """Round .5 up, the way the survey page always displayed percentages."""
    return int(math.floor(value + 0.5))


def compute_stats(
    ratings: Mapping[int, Optional[Rating]], visible: Sequence[Activity]
) -> SurveyStats:
    """
    Count ratings over the visible activities.

    progress = round(100 * total_rated / visible_count), 0 when nothing is visible.
    """
    counts = {rating: 0 for rating in Rating}
    for activity in visible:
        rating = ratings.get(activity.id)
        if rating is not None:
            counts[Rating(rating)] += 1

    total_rated = sum(counts.values())
    progress = round_half_up(100 * total_rated / len(visible)) if visible else 0

    return SurveyStats(
        love=counts[Rating.love],
        neutral=counts[Rating.neutral],
        hate=counts[Rating.hate],
        total_rated=total_rated,
        progress=progress,
    )


def is_complete(stats: SurveyStats, visible: Sequence[Activity]) -> bool:
    """Every visible activity is rated."""
    return stats.total_rated == len(visible)


def pillar_sections(
    visible: Sequence[Activity],
    responses: Mapping[int, Optional[StoredResponse]],
) -> List[PillarSection]:
    """Group visible activities by pillar, in order of first appearance."""
    grouped: "OrderedDict[int, List[Activity]]" = OrderedDict()
    for activity in visible:
        grouped.setdefault(activity.pillar, []).append(activity)

    sections = []
    for pillar, activities in grouped.items():
        rated = []
        for activity in activities:
            response = responses.get(activity.id)
            rated.append(
                RatedActivity(
                    **activity.model_dump(),
                    rating=response.rating if response else None,
                    comment=response.comment if response else None,
                )
            )
        sections.append(
            PillarSection(
                pillar=pillar,
                pillar_name=activities[0].pillar_name or f"Pillar {pillar}",
                rated_count=sum(1 for a in rated if a.rating is not None),
                total=len(rated),
                activities=rated,
            )
        )
    return sections


def rating_analytics(
    responses: Iterable[StoredResponse], activities: Sequence[Activity]
) -> AnalyticsOut:
    """
    Per (activity, rating) response counts across all clients.

    The percentage is the share of that activity's responses, so the
    percentages of one activity add up to 100.
    """
    counts: Dict[int, Dict[Rating, int]] = defaultdict(lambda: defaultdict(int))
    for response in responses:
        counts[response.activity_id][Rating(response.rating)] += 1

    names = {activity.id: activity.name for activity in activities}

    rows: List[RatingAnalytics] = []
    grouped: List[ActivityAnalytics] = []
    for activity_id in sorted(counts):
        per_rating = counts[activity_id]
        total = sum(per_rating.values())
        activity_rows = {}
        for rating in Rating:
            count = per_rating.get(rating, 0)
            if count == 0:
                continue
            row = RatingAnalytics(
                activity_id=activity_id,
                rating=rating,
                response_count=count,
                percentage=count / total * 100,
            )
            rows.append(row)
            activity_rows[rating] = row

        grouped.append(
            ActivityAnalytics(
                activity_id=activity_id,
                activity_name=names.get(activity_id, f"Activity {activity_id}"),
                total_responses=total,
                ratings=activity_rows,
            )
        )

    return AnalyticsOut(rows=rows, activities=grouped)
