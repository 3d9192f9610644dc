from django.conf import settings

from cpstats.models import PlatformStats
from cpstats.services.stats_store import find_all, stats_to_dict


def build_dashboard(records: list[PlatformStats], recent_days: int | None = None) -> dict:
    """
    Fold one user's per-platform records into an overview.

    `total_rating` is a plain sum of `rating_current` across platforms. For
    LeetCode that value is the global ranking, so the total is only a
    headline number, not a comparable rating.
    """
    if recent_days is None:
        recent_days = int(getattr(settings, "DASHBOARD_RECENT_DAYS", 7))

    overview = {
        "total_problems": 0,
        "total_rating": 0,
        "platforms": len(records),
        "recent_activity": [],
    }
    for record in records:
        overview["total_problems"] += record.problems_solved
        overview["total_rating"] += record.rating_current
        if recent_days > 0:
            for entry in record.daily_activity[-recent_days:]:
                overview["recent_activity"].append({**entry, "platform": record.platform})

    overview["recent_activity"].sort(key=lambda entry: entry["date"], reverse=True)
    return overview


def get_dashboard(user_id: int) -> dict:
    records = find_all(user_id)
    return {
        "overview": build_dashboard(records),
        "stats": [stats_to_dict(record) for record in records],
    }
