import calendar
import logging
import re
from datetime import date, datetime, time, timezone

from django.conf import settings
from django.utils import timezone as django_timezone

from cpstats.exceptions import InvalidRange, UpstreamUnavailable
from cpstats.services.api_client import CodeforcesClient, LeetCodeClient

logger = logging.getLogger(__name__)

LEETCODE_CONTEST_URL = "https://leetcode.com/contest/"
CF_CONTEST_URL = "https://codeforces.com/contest/"
FALLBACK_DURATION_HOURS = 1.5
DEFAULT_WEEKLY_TIME = time(2, 30, tzinfo=timezone.utc)
DEFAULT_BIWEEKLY_TIME = time(14, 30, tzinfo=timezone.utc)

MIN_YEAR = 1970
MAX_YEAR = 9999

PHASE_BEFORE = "BEFORE"
PHASE_FINISHED = "FINISHED"


def _configured_time(setting_name: str, default: time) -> time:
    raw = getattr(settings, setting_name, None)
    if not raw:
        return default
    try:
        hours, minutes = str(raw).split(":")
        return time(int(hours), int(minutes), tzinfo=timezone.utc)
    except ValueError:
        logger.warning("Invalid %s=%r, using %s", setting_name, raw, default.strftime("%H:%M"))
        return default


def resolve_contest_range(year=None, month=None, now: datetime | None = None) -> tuple[int, int]:
    """
    (year, month) for a contest query. Both omitted means the month of `now`.
    """
    year_missing = year in (None, "")
    month_missing = month in (None, "")
    if year_missing and month_missing:
        now = now or django_timezone.now()
        return now.year, now.month
    if year_missing or month_missing:
        raise InvalidRange("year and month must be given together")

    try:
        year = int(year)
        month = int(month)
    except (TypeError, ValueError) as exc:
        raise InvalidRange(f"year/month must be integers, got {year!r}/{month!r}") from exc

    if not 1 <= month <= 12:
        raise InvalidRange(f"month must be between 1 and 12, got {month}")
    if not MIN_YEAR <= year <= MAX_YEAR:
        raise InvalidRange(f"year must be between {MIN_YEAR} and {MAX_YEAR}, got {year}")
    return year, month


def _fallback_entry(kind: str, name: str, day: date, at: time, now: datetime) -> dict:
    start = datetime.combine(day, at)
    return {
        "id": f"{kind}-{day.isoformat()}",
        "name": name,
        "platform": "LeetCode",
        "start": start.isoformat(),
        "duration": FALLBACK_DURATION_HOURS,
        "url": LEETCODE_CONTEST_URL,
        "phase": PHASE_BEFORE if start > now else PHASE_FINISHED,
        "is_fallback": True,
    }


def synthesize_leetcode_contests(
    year: int,
    month: int,
    now: datetime,
    weekly_at: time | None = None,
    biweekly_at: time | None = None,
) -> list[dict]:
    """
    Stand-in LeetCode schedule for one month: a weekly contest every Sunday
    and a biweekly contest on every second Saturday (2nd, 4th, ... counted
    from the 1st of the month). `now` must be timezone-aware.
    """
    weekly_at = weekly_at or _configured_time("LEETCODE_WEEKLY_CONTEST_TIME", DEFAULT_WEEKLY_TIME)
    biweekly_at = biweekly_at or _configured_time("LEETCODE_BIWEEKLY_CONTEST_TIME", DEFAULT_BIWEEKLY_TIME)

    entries = []
    saturdays = 0
    days_in_month = calendar.monthrange(year, month)[1]
    for day_number in range(1, days_in_month + 1):
        day = date(year, month, day_number)
        weekday = day.weekday()
        if weekday == calendar.SUNDAY:
            entries.append(_fallback_entry("weekly", "LeetCode Weekly Contest", day, weekly_at, now))
        elif weekday == calendar.SATURDAY:
            saturdays += 1
            if saturdays % 2 == 0:
                entries.append(_fallback_entry("biweekly", "LeetCode Biweekly Contest", day, biweekly_at, now))
    return entries


def get_cf_upcoming_contests(now: datetime) -> list[dict]:
    results = []
    for contest in CodeforcesClient.get_contest_list():
        start_ts = contest.get("startTimeSeconds")
        contest_id = contest.get("id")
        if not start_ts or contest_id is None or contest.get("phase") != PHASE_BEFORE:
            continue
        start_time = datetime.fromtimestamp(int(start_ts), tz=timezone.utc)
        if start_time <= now:
            continue
        results.append(
            {
                "id": contest_id,
                "name": contest.get("name") or str(contest_id),
                "platform": "Codeforces",
                "start": start_time.isoformat(),
                "duration": int(contest.get("durationSeconds") or 0) / 3600,
                "url": f"{CF_CONTEST_URL}{contest_id}",
                "phase": PHASE_BEFORE,
                "is_fallback": False,
            }
        )
    return results


def get_leetcode_upcoming_contests(now: datetime) -> list[dict]:
    results = []
    for contest in LeetCodeClient.get_upcoming_contests():
        start_time = datetime.fromtimestamp(int(contest["startTime"]), tz=timezone.utc)
        if start_time <= now:
            continue
        slug = contest.get("titleSlug") or ""
        results.append(
            {
                "id": slug,
                "name": contest.get("title") or slug,
                "platform": "LeetCode",
                "start": start_time.isoformat(),
                "duration": int(contest["duration"]) / 3600,
                "url": f"{LEETCODE_CONTEST_URL}{slug}",
                "phase": PHASE_BEFORE,
                "is_fallback": False,
                "is_virtual": bool(contest.get("isVirtual")),
            }
        )
    return results


def get_upcoming_contests(year=None, month=None, now: datetime | None = None) -> dict:
    """
    Upcoming Codeforces + LeetCode contests. When LeetCode cannot be read the
    synthesized calendar for (year, month) takes its place and
    `leetcode_api_status` is "fallback".
    """
    now = now or django_timezone.now()
    year, month = resolve_contest_range(year, month, now)

    codeforces_status = "live"
    try:
        cf_contests = get_cf_upcoming_contests(now)
    except UpstreamUnavailable as exc:
        logger.warning("Codeforces contest list unavailable: %s", exc)
        cf_contests = []
        codeforces_status = "unavailable"

    leetcode_status = "live"
    try:
        lc_contests = get_leetcode_upcoming_contests(now)
    except UpstreamUnavailable as exc:
        logger.warning("LeetCode contest list unavailable, using fallback calendar: %s", exc)
        lc_contests = synthesize_leetcode_contests(year, month, now)
        leetcode_status = "fallback"

    contests = sorted(cf_contests + lc_contests, key=lambda row: (row["start"], row["platform"]))
    return {
        "contests": contests,
        "leetcode_api_status": leetcode_status,
        "codeforces_api_status": codeforces_status,
        "range": {"year": year, "month": month},
    }


def short_contest_title(title: str) -> str:
    number = re.search(r"\d+", title or "")
    if number and "Biweekly Contest" in title:
        return f"B{number.group(0)}"
    if number and "Weekly Contest" in title:
        return f"W{number.group(0)}"
    return title


def build_rating_timeline(all_contests: list[dict], history: list[dict]) -> list[dict]:
    """
    Every calendar contest between the user's first and last participation,
    flagged with whether the user took part and their rating/ranking there.
    """
    by_start = {}
    for row in history:
        start = (row.get("contest") or {}).get("startTime")
        if start is not None:
            by_start[int(start)] = row
    if not by_start:
        return []

    first, last = min(by_start), max(by_start)
    timeline = []
    for contest in sorted(all_contests, key=lambda c: int(c["startTime"])):
        start = int(contest["startTime"])
        if not first <= start <= last:
            continue
        row = by_start.get(start)
        title = contest.get("title") or ""
        timeline.append(
            {
                "title": title,
                "short_title": short_contest_title(title),
                "start_time": start,
                "rating": row.get("rating") if row else None,
                "ranking": row.get("ranking") if row else None,
                "participated": row is not None,
            }
        )
    return timeline


def get_leetcode_rating_timeline(handle: str) -> list[dict]:
    contests = LeetCodeClient.get_contest_calendar()
    ranking = LeetCodeClient.get_contest_ranking(handle)
    return build_rating_timeline(contests, ranking["userContestRankingHistory"])
