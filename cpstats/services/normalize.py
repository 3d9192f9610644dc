"""
Turn raw LeetCode / Codeforces payloads into one statistics shape.

Everything here is pure: no I/O, no settings, and every accumulator lives
inside the call that builds it.
"""
from collections import Counter
from dataclasses import asdict, dataclass, field
from datetime import datetime, timezone

from cpstats.exceptions import PlatformUserNotFound
from cpstats.models import Platform
from cpstats.services.api_client import CodeforcesPayload, LeetCodePayload

# Codeforces gym contests have ids >= 100000.
CF_OFFICIAL_CONTEST_ID_LIMIT = 100000
CF_ACCEPTED_VERDICT = "OK"
CF_CONTESTANT = "CONTESTANT"

LEETCODE_DIFFICULTIES = ("easy", "medium", "hard")


@dataclass
class NormalizedStats:
    platform: str
    handle: str
    rating_current: int = 0
    rating_max: int = 0
    rating_history: list[dict] = field(default_factory=list)
    problems_total: int = 0
    problems_solved: int = 0
    problems_attempted: int = 0
    solved_easy: int = 0
    solved_medium: int = 0
    solved_hard: int = 0
    problems_by_tag: list[dict] = field(default_factory=list)
    contests_total: int = 0
    contests_best_rank: int | None = None
    contest_history: list[dict] = field(default_factory=list)
    submissions: list[dict] = field(default_factory=list)
    daily_activity: list[dict] = field(default_factory=list)

    def as_fields(self) -> dict:
        """Model field values, without the (user, platform) key."""
        fields = asdict(self)
        fields.pop("platform")
        return fields


def _safe_int(value, default: int = 0) -> int:
    try:
        return int(value) if value is not None else default
    except (TypeError, ValueError):
        return default


def _utc(epoch_seconds) -> datetime:
    return datetime.fromtimestamp(int(epoch_seconds), tz=timezone.utc)


def _iso(epoch_seconds) -> str:
    return _utc(epoch_seconds).isoformat()


def _day(epoch_seconds) -> str:
    return _utc(epoch_seconds).date().isoformat()


def _daily_entries(solved: Counter, submitted: Counter) -> list[dict]:
    return [
        {
            "date": day,
            "problems_solved": solved[day],
            "submissions": submitted[day],
        }
        for day in sorted(submitted)
    ]


def normalize_leetcode(payload: LeetCodePayload) -> NormalizedStats:
    user = payload.user
    if not user:
        raise PlatformUserNotFound(Platform.LEETCODE, payload.handle)

    by_difficulty = dict.fromkeys(LEETCODE_DIFFICULTIES, 0)
    for row in (user.get("submitStats") or {}).get("acSubmissionNum") or []:
        label = str(row.get("difficulty") or "").lower()
        # The "All" row is an aggregate of the three below.
        if label in by_difficulty:
            by_difficulty[label] = _safe_int(row.get("count"))
    total = sum(by_difficulty.values())

    ranking = _safe_int((user.get("profile") or {}).get("ranking"))

    # LeetCode only reports one count per day, used for both counters.
    per_day = Counter()
    for epoch_key, count in payload.calendar.items():
        per_day[_day(epoch_key)] += count

    submissions = [
        {
            "problem_id": sub.get("titleSlug"),
            "problem_name": sub.get("title"),
            "status": sub.get("statusDisplay"),
            "language": sub.get("lang"),
            "timestamp": _iso(sub["timestamp"]),
            "tags": [],
        }
        for sub in payload.recent_submissions
    ]

    return NormalizedStats(
        platform=Platform.LEETCODE,
        handle=payload.handle,
        rating_current=ranking,
        rating_max=ranking,
        problems_total=total,
        problems_solved=total,
        problems_attempted=total,
        solved_easy=by_difficulty["easy"],
        solved_medium=by_difficulty["medium"],
        solved_hard=by_difficulty["hard"],
        submissions=submissions,
        daily_activity=_daily_entries(per_day, per_day),
    )


def _is_official_contest_solve(sub: dict) -> bool:
    if sub.get("verdict") != CF_ACCEPTED_VERDICT:
        return False
    contest_id = _safe_int(sub["problem"].get("contestId"))
    if not contest_id or contest_id >= CF_OFFICIAL_CONTEST_ID_LIMIT:
        return False
    author = sub.get("author") or {}
    return author.get("participantType") == CF_CONTESTANT


def normalize_codeforces(payload: CodeforcesPayload) -> NormalizedStats:
    info = payload.user_info
    changes = payload.rating_changes
    raw_submissions = payload.submissions

    rating_history = [
        {
            "rating": _safe_int(change.get("newRating")),
            "date": _iso(change["ratingUpdateTimeSeconds"]),
            "contest": change.get("contestName") or "",
        }
        for change in changes
    ]
    contest_history = [
        {
            "name": change.get("contestName") or "",
            "rank": _safe_int(change.get("rank")),
            "rating": _safe_int(change.get("newRating")),
            "date": _iso(change["ratingUpdateTimeSeconds"]),
            "participants": _safe_int(change.get("participants")),
        }
        for change in changes
    ]
    ranks = [_safe_int(change.get("rank")) for change in changes if change.get("rank") is not None]

    solved_keys = set()
    tag_counts = Counter()
    solved_per_day = Counter()
    submitted_per_day = Counter()
    submissions = []
    for sub in raw_submissions:
        problem = sub["problem"]
        tags = list(problem.get("tags") or [])
        day = _day(sub["creationTimeSeconds"])
        accepted = sub.get("verdict") == CF_ACCEPTED_VERDICT

        submitted_per_day[day] += 1
        if accepted:
            solved_per_day[day] += 1
            tag_counts.update(tags)
        if _is_official_contest_solve(sub):
            # One accepted problem usually has several OK submissions.
            solved_keys.add((_safe_int(problem.get("contestId")), problem.get("index")))

        submissions.append(
            {
                "problem_id": problem.get("index"),
                "problem_name": problem.get("name"),
                "status": sub.get("verdict"),
                "language": sub.get("programmingLanguage"),
                "timestamp": _iso(sub["creationTimeSeconds"]),
                "tags": tags,
            }
        )

    return NormalizedStats(
        platform=Platform.CODEFORCES,
        handle=payload.handle,
        rating_current=_safe_int(info.get("rating")),
        rating_max=_safe_int(info.get("maxRating")),
        rating_history=rating_history,
        problems_total=len(raw_submissions),
        problems_solved=len(solved_keys),
        problems_attempted=len(raw_submissions),
        problems_by_tag=[{"tag": tag, "count": count} for tag, count in tag_counts.items()],
        contests_total=len(changes),
        contests_best_rank=min(ranks) if ranks else None,
        contest_history=contest_history,
        submissions=submissions,
        daily_activity=_daily_entries(solved_per_day, submitted_per_day),
    )


NORMALIZERS = {
    Platform.LEETCODE: (LeetCodePayload, normalize_leetcode),
    Platform.CODEFORCES: (CodeforcesPayload, normalize_codeforces),
}

if set(NORMALIZERS) != set(Platform):
    raise RuntimeError("Every platform needs exactly one normalizer.")


def normalize(platform: str, payload) -> NormalizedStats:
    payload_type, normalizer = NORMALIZERS[Platform(platform)]
    if not isinstance(payload, payload_type):
        raise TypeError(f"{platform} expects {payload_type.__name__}, got {type(payload).__name__}")
    return normalizer(payload)
