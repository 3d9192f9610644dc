from datetime import datetime, time, timezone
from unittest.mock import Mock, patch

from django.test import SimpleTestCase, override_settings

from cpstats.exceptions import InvalidRange, UpstreamUnavailable
from cpstats.services import contest_catalog
from cpstats.services.api_client import CodeforcesClient, LeetCodeClient

# February 2026 starts on a Sunday.
FEB_2026_NOW = datetime(2026, 2, 10, 12, 0, tzinfo=timezone.utc)


class SynthesizeLeetCodeContestsTests(SimpleTestCase):
    def test_february_2026_schedule(self):
        contests = contest_catalog.synthesize_leetcode_contests(2026, 2, FEB_2026_NOW)

        weekly = [c for c in contests if c["name"] == "LeetCode Weekly Contest"]
        biweekly = [c for c in contests if c["name"] == "LeetCode Biweekly Contest"]
        self.assertEqual(
            [c["start"] for c in weekly],
            [
                "2026-02-01T02:30:00+00:00",
                "2026-02-08T02:30:00+00:00",
                "2026-02-15T02:30:00+00:00",
                "2026-02-22T02:30:00+00:00",
            ],
        )
        self.assertEqual(
            [c["start"] for c in biweekly],
            ["2026-02-14T14:30:00+00:00", "2026-02-28T14:30:00+00:00"],
        )

    def test_entries_are_flagged_and_phased(self):
        contests = contest_catalog.synthesize_leetcode_contests(2026, 2, FEB_2026_NOW)

        for contest in contests:
            self.assertTrue(contest["is_fallback"])
            self.assertEqual(contest["platform"], "LeetCode")
            self.assertEqual(contest["duration"], 1.5)
        phases = {c["id"]: c["phase"] for c in contests}
        self.assertEqual(phases["weekly-2026-02-08"], "FINISHED")
        self.assertEqual(phases["biweekly-2026-02-14"], "BEFORE")

    def test_same_input_same_output(self):
        first = contest_catalog.synthesize_leetcode_contests(2026, 2, FEB_2026_NOW)
        second = contest_catalog.synthesize_leetcode_contests(2026, 2, FEB_2026_NOW)
        self.assertEqual(first, second)

    def test_explicit_times_override_defaults(self):
        contests = contest_catalog.synthesize_leetcode_contests(
            2026,
            2,
            FEB_2026_NOW,
            weekly_at=time(3, 0, tzinfo=timezone.utc),
        )
        self.assertEqual(contests[0]["start"], "2026-02-01T03:00:00+00:00")

    @override_settings(LEETCODE_WEEKLY_CONTEST_TIME="bogus")
    def test_invalid_configured_time_uses_default(self):
        contests = contest_catalog.synthesize_leetcode_contests(2026, 2, FEB_2026_NOW)
        self.assertEqual(contests[0]["start"], "2026-02-01T02:30:00+00:00")


class ResolveContestRangeTests(SimpleTestCase):
    def test_defaults_to_current_month(self):
        self.assertEqual(contest_catalog.resolve_contest_range(now=FEB_2026_NOW), (2026, 2))

    def test_accepts_query_strings(self):
        self.assertEqual(contest_catalog.resolve_contest_range("2025", "11"), (2025, 11))

    def test_rejects_bad_values(self):
        for year, month in [("2026", None), (None, "3"), ("2026", "13"), ("2026", "0"), ("abc", "3"), ("1969", "5")]:
            with self.subTest(year=year, month=month):
                with self.assertRaises(InvalidRange):
                    contest_catalog.resolve_contest_range(year, month)


class UpcomingContestsTests(SimpleTestCase):
    def test_leetcode_failure_switches_to_fallback(self):
        with patch.object(
            LeetCodeClient,
            "get_upcoming_contests",
            side_effect=UpstreamUnavailable("leetcode", "HTTP 503"),
        ), patch.object(CodeforcesClient, "get_contest_list", return_value=[]):
            payload = contest_catalog.get_upcoming_contests(2026, 2, now=FEB_2026_NOW)

        self.assertEqual(payload["leetcode_api_status"], "fallback")
        self.assertEqual(payload["codeforces_api_status"], "live")
        self.assertEqual(payload["range"], {"year": 2026, "month": 2})
        self.assertEqual(len(payload["contests"]), 6)
        self.assertTrue(all(c["is_fallback"] for c in payload["contests"]))

    def test_live_lists_are_merged_and_sorted(self):
        cf_contests = [
            {"id": 2100, "name": "Codeforces Round 1000", "phase": "BEFORE",
             "startTimeSeconds": 1771002000, "durationSeconds": 7200},
            {"id": 2000, "name": "Old Round", "phase": "FINISHED",
             "startTimeSeconds": 1760000000, "durationSeconds": 7200},
        ]
        lc_contests = [
            {"title": "Weekly Contest 488", "titleSlug": "weekly-contest-488",
             "startTime": 1770949800, "duration": 5400},
            {"title": "Weekly Contest 480", "titleSlug": "weekly-contest-480",
             "startTime": 1765000000, "duration": 5400},
        ]
        with patch.object(LeetCodeClient, "get_upcoming_contests", return_value=lc_contests), \
                patch.object(CodeforcesClient, "get_contest_list", return_value=cf_contests):
            payload = contest_catalog.get_upcoming_contests(now=FEB_2026_NOW)

        self.assertEqual(payload["leetcode_api_status"], "live")
        self.assertEqual([c["name"] for c in payload["contests"]], ["Weekly Contest 488", "Codeforces Round 1000"])
        self.assertEqual(payload["contests"][0]["url"], "https://leetcode.com/contest/weekly-contest-488")
        self.assertEqual(payload["contests"][1]["duration"], 2.0)
        self.assertFalse(any(c["is_fallback"] for c in payload["contests"]))

    def test_codeforces_failure_is_reported(self):
        with patch.object(LeetCodeClient, "get_upcoming_contests", return_value=[]), \
                patch.object(
                    CodeforcesClient,
                    "get_contest_list",
                    side_effect=UpstreamUnavailable("codeforces", "contest.list: HTTP 502"),
                ):
            payload = contest_catalog.get_upcoming_contests(now=FEB_2026_NOW)

        self.assertEqual(payload["codeforces_api_status"], "unavailable")
        self.assertEqual(payload["contests"], [])

    def test_invalid_range_propagates(self):
        with self.assertRaises(InvalidRange):
            contest_catalog.get_upcoming_contests(2026, 14, now=FEB_2026_NOW)


class RatingTimelineTests(SimpleTestCase):
    def test_short_titles(self):
        self.assertEqual(contest_catalog.short_contest_title("Weekly Contest 455"), "W455")
        self.assertEqual(contest_catalog.short_contest_title("Biweekly Contest 124"), "B124")
        self.assertEqual(contest_catalog.short_contest_title("Special Event"), "Special Event")

    def test_timeline_spans_first_to_last_participation(self):
        calendar = [
            {"title": "Weekly Contest 1", "startTime": 100},
            {"title": "Weekly Contest 2", "startTime": 200},
            {"title": "Biweekly Contest 1", "startTime": 250},
            {"title": "Weekly Contest 3", "startTime": 300},
            {"title": "Weekly Contest 4", "startTime": 400},
        ]
        history = [
            {"contest": {"title": "Weekly Contest 2", "startTime": 200}, "rating": 1510.5, "ranking": 900},
            {"contest": {"title": "Weekly Contest 3", "startTime": 300}, "rating": 1540.2, "ranking": 700},
        ]
        timeline = contest_catalog.build_rating_timeline(calendar, history)

        self.assertEqual([row["short_title"] for row in timeline], ["W2", "B1", "W3"])
        self.assertEqual([row["participated"] for row in timeline], [True, False, True])
        self.assertIsNone(timeline[1]["rating"])
        self.assertEqual(timeline[2]["ranking"], 700)

    def test_empty_history_gives_empty_timeline(self):
        calendar = [{"title": "Weekly Contest 1", "startTime": 100}]
        self.assertEqual(contest_catalog.build_rating_timeline(calendar, []), [])

    def test_leetcode_rating_timeline_uses_both_queries(self):
        with patch.object(
            LeetCodeClient,
            "get_contest_calendar",
            return_value=[{"title": "Weekly Contest 7", "startTime": 500}],
        ), patch.object(
            LeetCodeClient,
            "get_contest_ranking",
            return_value={
                "userContestRanking": None,
                "userContestRankingHistory": [
                    {"contest": {"title": "Weekly Contest 7", "startTime": 500}, "rating": 1600, "ranking": 1},
                ],
            },
        ) as ranking_mock:
            timeline = contest_catalog.get_leetcode_rating_timeline("alice")

        ranking_mock.assert_called_once_with("alice")
        self.assertEqual(timeline[0]["short_title"], "W7")


class MalformedContestListTests(SimpleTestCase):
    def test_non_numeric_codeforces_start_marks_codeforces_unavailable(self):
        response = Mock(status_code=200)
        response.json.return_value = {
            "status": "OK",
            "result": [{"id": 1, "name": "Round", "phase": "BEFORE", "startTimeSeconds": "soon"}],
        }
        with patch("cpstats.services.api_client.requests.get", return_value=response), \
                patch.object(LeetCodeClient, "get_upcoming_contests", return_value=[]):
            payload = contest_catalog.get_upcoming_contests(now=FEB_2026_NOW)

        self.assertEqual(payload["codeforces_api_status"], "unavailable")
        self.assertEqual(payload["leetcode_api_status"], "live")
        self.assertEqual(payload["contests"], [])
