import logging
from datetime import date, datetime

from django.db import transaction
from django.utils import timezone

from cpstats.models import Platform, PlatformStats
from cpstats.services.normalize import NormalizedStats

logger = logging.getLogger(__name__)


def _day_key(day) -> str:
    if isinstance(day, datetime):
        return day.date().isoformat()
    if isinstance(day, date):
        return day.isoformat()
    return date.fromisoformat(str(day)[:10]).isoformat()


def accumulate_daily_activity(entries: list[dict], day, problems_solved: int, submissions: int) -> list[dict]:
    """
    Add one day's counts to a daily-activity list. The date's existing
    entry is incremented, otherwise a new entry is inserted. Returns a new
    list sorted by date.
    """
    if problems_solved < 0 or submissions < 0:
        raise ValueError("Activity counts cannot be negative.")

    key = _day_key(day)
    merged = {entry["date"]: dict(entry) for entry in entries}
    current = merged.setdefault(key, {"date": key, "problems_solved": 0, "submissions": 0})
    current["problems_solved"] += int(problems_solved)
    current["submissions"] += int(submissions)
    return [merged[k] for k in sorted(merged)]


def fold_daily_activity(stored: list[dict], fresh: list[dict]) -> list[dict]:
    """
    Merge a freshly fetched daily-activity list into the stored one.
    Per date the larger counter wins, so counts never go down between
    fetches and days outside the upstream window are kept.
    """
    merged = {entry["date"]: dict(entry) for entry in stored}
    for entry in fresh:
        current = merged.get(entry["date"])
        if current is None:
            merged[entry["date"]] = dict(entry)
            continue
        current["problems_solved"] = max(current["problems_solved"], entry["problems_solved"])
        current["submissions"] = max(current["submissions"], entry["submissions"])
    return [merged[k] for k in sorted(merged)]


def find_one(user_id: int, platform: str) -> PlatformStats | None:
    return PlatformStats.objects.filter(user_id=user_id, platform=platform).first()


def find_all(user_id: int) -> list[PlatformStats]:
    return list(PlatformStats.objects.filter(user_id=user_id).order_by("platform"))


def upsert(user_id: int, platform: str, fields: dict) -> PlatformStats:
    record, _ = PlatformStats.objects.update_or_create(
        user_id=user_id,
        platform=platform,
        defaults=fields,
    )
    return record


def merge_and_persist(user_id: int, platform: str, fragment: NormalizedStats) -> PlatformStats:
    """
    Refresh write: the fragment replaces every snapshot field of the
    (user, platform) record; daily activity is folded per date.
    """
    platform = Platform(platform)
    if fragment.platform != platform:
        raise ValueError(f"Fragment for {fragment.platform} cannot be stored as {platform}.")

    fields = fragment.as_fields()
    with transaction.atomic():
        existing = (
            PlatformStats.objects.select_for_update()
            .filter(user_id=user_id, platform=platform)
            .first()
        )
        if existing:
            fields["daily_activity"] = fold_daily_activity(existing.daily_activity, fragment.daily_activity)
        fields["last_updated"] = timezone.now()
        record = upsert(user_id, platform, fields)

    logger.info(
        "Stored %s stats for user %s (%s): solved=%s, %d active days",
        platform,
        user_id,
        fragment.handle,
        record.problems_solved,
        len(record.daily_activity),
    )
    return record


def record_daily_activity(
    user_id: int,
    platform: str,
    day,
    problems_solved: int,
    submissions: int,
) -> PlatformStats:
    """
    Incremental write: add one day's counts to an existing record.
    Raises PlatformStats.DoesNotExist when the user never fetched this platform.
    """
    with transaction.atomic():
        record = PlatformStats.objects.select_for_update().get(user_id=user_id, platform=platform)
        record.daily_activity = accumulate_daily_activity(
            record.daily_activity,
            day,
            problems_solved,
            submissions,
        )
        record.save(update_fields=["daily_activity", "updated_at"])
    return record


def stats_to_dict(record: PlatformStats) -> dict:
    return {
        "platform": record.platform,
        "handle": record.handle,
        "rating": {
            "current": record.rating_current,
            "max": record.rating_max,
            "history": record.rating_history,
        },
        "problems": {
            "total": record.problems_total,
            "solved": record.problems_solved,
            "attempted": record.problems_attempted,
            "by_difficulty": {
                "easy": record.solved_easy,
                "medium": record.solved_medium,
                "hard": record.solved_hard,
            },
            "by_tag": record.problems_by_tag,
        },
        "contests": {
            "total": record.contests_total,
            "best_rank": record.contests_best_rank,
            "history": record.contest_history,
        },
        "activity": {
            "submissions": record.submissions,
            "daily_activity": record.daily_activity,
        },
        "last_updated": record.last_updated.isoformat() if record.last_updated else None,
    }
