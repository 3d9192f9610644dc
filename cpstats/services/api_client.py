import json
import logging
from dataclasses import dataclass

import requests
from django.conf import settings

from cpstats.exceptions import PlatformUserNotFound, UpstreamShapeError, UpstreamUnavailable
from cpstats.models import Platform

logger = logging.getLogger(__name__)


LEETCODE_STATS_QUERY = """
query getUserProfile($username: String!, $limit: Int!) {
  matchedUser(username: $username) {
    username
    profile {
      ranking
      realName
      userAvatar
    }
    submitStats {
      acSubmissionNum {
        difficulty
        count
        submissions
      }
    }
    submissionCalendar
  }
  recentSubmissionList(username: $username, limit: $limit) {
    title
    titleSlug
    timestamp
    statusDisplay
    lang
  }
}
"""

LEETCODE_UPCOMING_QUERY = """
query {
  allContests {
    title
    titleSlug
    startTime
    duration
    isVirtual
  }
}
"""

LEETCODE_CALENDAR_QUERY = """
query {
  contestCalendar {
    contests {
      title
      titleSlug
      startTime
      duration
    }
  }
}
"""

LEETCODE_CONTEST_RANKING_QUERY = """
query userContestRankingInfo($username: String!) {
  userContestRanking(username: $username) {
    attendedContestsCount
    rating
    globalRanking
    totalParticipants
    topPercentage
  }
  userContestRankingHistory(username: $username) {
    contest {
      title
      startTime
    }
    rating
    ranking
    trendDirection
  }
}
"""


@dataclass(frozen=True)
class LeetCodePayload:
    handle: str
    user: dict | None
    calendar: dict[str, int]
    recent_submissions: list[dict]


@dataclass(frozen=True)
class CodeforcesPayload:
    handle: str
    user_info: dict
    rating_changes: list[dict]
    submissions: list[dict]


def _timeout() -> int:
    return int(getattr(settings, "UPSTREAM_TIMEOUT_SECONDS", 10))


def _require_dicts(platform: str, value, what: str) -> list[dict]:
    if not isinstance(value, list) or not all(isinstance(row, dict) for row in value):
        raise UpstreamShapeError(platform, f"{what} is not a list of objects")
    return value


def _require_int_fields(
    platform: str,
    rows: list[dict],
    fields: tuple[str, ...],
    what: str,
    optional: bool = False,
) -> None:
    for row in rows:
        for name in fields:
            if optional and row.get(name) is None:
                continue
            try:
                int(row[name])
            except (KeyError, TypeError, ValueError) as exc:
                raise UpstreamShapeError(platform, f"{what} entry without integer '{name}'") from exc


def _require_optional_dict(platform: str, value, what: str) -> dict | None:
    if value is not None and not isinstance(value, dict):
        raise UpstreamShapeError(platform, f"{what} is not an object")
    return value


def _require_str_list(platform: str, value, what: str) -> list[str]:
    if value is None:
        return []
    if not isinstance(value, list) or not all(isinstance(item, str) for item in value):
        raise UpstreamShapeError(platform, f"{what} is not a list of strings")
    return value


class LeetCodeClient:
    HEADERS = {
        "Content-Type": "application/json",
        "Referer": "https://leetcode.com",
        "Origin": "https://leetcode.com",
        "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    }

    @classmethod
    def _graphql(cls, query: str, variables: dict | None = None) -> dict:
        url = getattr(settings, "LEETCODE_GRAPHQL_URL", "https://leetcode.com/graphql")
        try:
            response = requests.post(
                url,
                json={"query": query, "variables": variables or {}},
                headers=cls.HEADERS,
                timeout=_timeout(),
            )
            response.raise_for_status()
        except requests.RequestException as exc:
            raise UpstreamUnavailable(Platform.LEETCODE, str(exc)) from exc

        try:
            body = response.json()
        except ValueError as exc:
            raise UpstreamShapeError(Platform.LEETCODE, "response is not JSON") from exc

        data = body.get("data") if isinstance(body, dict) else None
        if not isinstance(data, dict):
            raise UpstreamShapeError(Platform.LEETCODE, "response has no 'data' object")
        return data

    @staticmethod
    def _parse_calendar(raw) -> dict[str, int]:
        # LeetCode ships the calendar as a JSON-encoded string: {"<epoch seconds>": count}
        if raw in (None, ""):
            return {}
        try:
            calendar = json.loads(raw) if isinstance(raw, str) else raw
        except ValueError as exc:
            raise UpstreamShapeError(Platform.LEETCODE, "submissionCalendar is not valid JSON") from exc
        if not isinstance(calendar, dict):
            raise UpstreamShapeError(Platform.LEETCODE, "submissionCalendar is not an object")
        try:
            return {str(int(key)): int(count) for key, count in calendar.items()}
        except (TypeError, ValueError) as exc:
            raise UpstreamShapeError(Platform.LEETCODE, "submissionCalendar has non-numeric entries") from exc

    @classmethod
    def fetch_stats(cls, handle: str) -> LeetCodePayload:
        """
        Profile, accepted counts per difficulty, submission calendar and the
        most recent submissions in a single GraphQL round trip.
        """
        limit = int(getattr(settings, "LEETCODE_RECENT_SUBMISSIONS_LIMIT", 50))
        data = cls._graphql(LEETCODE_STATS_QUERY, {"username": handle, "limit": limit})

        user = data.get("matchedUser")
        if user is None:
            return LeetCodePayload(handle=handle, user=None, calendar={}, recent_submissions=[])
        if not isinstance(user, dict):
            raise UpstreamShapeError(Platform.LEETCODE, "matchedUser is not an object")
        _require_optional_dict(Platform.LEETCODE, user.get("profile"), "matchedUser.profile")

        submit_stats = user.get("submitStats")
        if not isinstance(submit_stats, dict):
            raise UpstreamShapeError(Platform.LEETCODE, "matchedUser.submitStats missing")
        _require_dicts(Platform.LEETCODE, submit_stats.get("acSubmissionNum"), "acSubmissionNum")

        calendar = cls._parse_calendar(user.get("submissionCalendar"))

        recent = _require_dicts(
            Platform.LEETCODE,
            data.get("recentSubmissionList") or [],
            "recentSubmissionList",
        )
        _require_int_fields(Platform.LEETCODE, recent, ("timestamp",), "recentSubmissionList")

        return LeetCodePayload(
            handle=handle,
            user=user,
            calendar=calendar,
            recent_submissions=recent,
        )

    @classmethod
    def get_upcoming_contests(cls) -> list[dict]:
        data = cls._graphql(LEETCODE_UPCOMING_QUERY)
        contests = _require_dicts(Platform.LEETCODE, data.get("allContests") or [], "allContests")
        _require_int_fields(Platform.LEETCODE, contests, ("startTime", "duration"), "allContests")
        return contests

    @classmethod
    def get_contest_calendar(cls) -> list[dict]:
        data = cls._graphql(LEETCODE_CALENDAR_QUERY)
        calendar = data.get("contestCalendar")
        if not isinstance(calendar, dict):
            raise UpstreamShapeError(Platform.LEETCODE, "contestCalendar missing")
        contests = _require_dicts(Platform.LEETCODE, calendar.get("contests") or [], "contestCalendar.contests")
        _require_int_fields(Platform.LEETCODE, contests, ("startTime",), "contestCalendar.contests")
        return contests

    @classmethod
    def get_contest_ranking(cls, handle: str) -> dict:
        data = cls._graphql(LEETCODE_CONTEST_RANKING_QUERY, {"username": handle})
        ranking = data.get("userContestRanking")
        if ranking is not None and not isinstance(ranking, dict):
            raise UpstreamShapeError(Platform.LEETCODE, "userContestRanking is not an object")
        history = _require_dicts(
            Platform.LEETCODE,
            data.get("userContestRankingHistory") or [],
            "userContestRankingHistory",
        )
        contests = []
        for row in history:
            contest = _require_optional_dict(Platform.LEETCODE, row.get("contest"), "userContestRankingHistory.contest")
            if contest is not None:
                contests.append(contest)
        _require_int_fields(
            Platform.LEETCODE,
            contests,
            ("startTime",),
            "userContestRankingHistory.contest",
            optional=True,
        )
        return {
            "userContestRanking": ranking,
            "userContestRankingHistory": history,
        }


class CodeforcesClient:
    BASE_URL = "https://codeforces.com/api"

    @classmethod
    def _call(cls, method: str, params: dict, handle: str | None = None):
        base_url = getattr(settings, "CODEFORCES_API_URL", cls.BASE_URL).rstrip("/")
        url = f"{base_url}/{method}"
        try:
            response = requests.get(url, params=params, timeout=_timeout())
        except requests.RequestException as exc:
            raise UpstreamUnavailable(Platform.CODEFORCES, f"{method}: {exc}") from exc

        try:
            body = response.json()
        except ValueError:
            body = None

        # Codeforces answers unknown handles with HTTP 400 + status FAILED.
        if isinstance(body, dict) and body.get("status") == "FAILED":
            comment = str(body.get("comment") or "")
            if handle and "not found" in comment.lower():
                raise PlatformUserNotFound(Platform.CODEFORCES, handle)
            raise UpstreamUnavailable(Platform.CODEFORCES, f"{method}: {comment or response.status_code}")

        if response.status_code != 200:
            raise UpstreamUnavailable(Platform.CODEFORCES, f"{method}: HTTP {response.status_code}")

        if not isinstance(body, dict) or body.get("status") != "OK" or "result" not in body:
            raise UpstreamShapeError(Platform.CODEFORCES, f"{method}: unexpected payload")
        return body["result"]

    @classmethod
    def fetch_stats(cls, handle: str) -> CodeforcesPayload:
        """
        user.info + user.rating + user.status. The three calls must all
        succeed; the first failure propagates and nothing is kept.
        """
        count = int(getattr(settings, "CF_SUBMISSIONS_COUNT", 1000))

        info = _require_dicts(
            Platform.CODEFORCES,
            cls._call("user.info", {"handles": handle}, handle=handle),
            "user.info",
        )
        if not info:
            raise PlatformUserNotFound(Platform.CODEFORCES, handle)

        rating_changes = _require_dicts(
            Platform.CODEFORCES,
            cls._call("user.rating", {"handle": handle}, handle=handle),
            "user.rating",
        )
        _require_int_fields(
            Platform.CODEFORCES,
            rating_changes,
            ("ratingUpdateTimeSeconds", "newRating"),
            "user.rating",
        )

        submissions = _require_dicts(
            Platform.CODEFORCES,
            cls._call("user.status", {"handle": handle, "from": 1, "count": count}, handle=handle),
            "user.status",
        )
        _require_int_fields(Platform.CODEFORCES, submissions, ("creationTimeSeconds",), "user.status")
        for sub in submissions:
            problem = sub.get("problem")
            if not isinstance(problem, dict):
                raise UpstreamShapeError(Platform.CODEFORCES, "user.status entry without problem")
            _require_str_list(Platform.CODEFORCES, problem.get("tags"), "user.status problem.tags")
            _require_optional_dict(Platform.CODEFORCES, sub.get("author"), "user.status author")

        logger.debug(
            "Codeforces payload for %s: %d rating changes, %d submissions",
            handle,
            len(rating_changes),
            len(submissions),
        )
        return CodeforcesPayload(
            handle=handle,
            user_info=info[0],
            rating_changes=rating_changes,
            submissions=submissions,
        )

    @classmethod
    def get_contest_list(cls) -> list[dict]:
        contests = _require_dicts(
            Platform.CODEFORCES,
            cls._call("contest.list", {"gym": "false"}),
            "contest.list",
        )
        _require_int_fields(Platform.CODEFORCES, contests, ("id",), "contest.list")
        _require_int_fields(
            Platform.CODEFORCES,
            contests,
            ("startTimeSeconds", "durationSeconds"),
            "contest.list",
            optional=True,
        )
        return contests


CLIENTS = {
    Platform.LEETCODE: LeetCodeClient,
    Platform.CODEFORCES: CodeforcesClient,
}
