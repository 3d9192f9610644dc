from django.contrib.auth.models import User
from django.test import SimpleTestCase, TestCase

from cpstats.models import Platform, PlatformStats
from cpstats.services.dashboard import build_dashboard, get_dashboard


def _activity(days, month="2024-03"):
    return [
        {"date": f"{month}-{day:02d}", "problems_solved": day, "submissions": day}
        for day in days
    ]


class BuildDashboardTests(SimpleTestCase):
    def test_totals_sum_across_platforms(self):
        records = [
            PlatformStats(platform=Platform.LEETCODE, problems_solved=120, rating_current=1800),
            PlatformStats(platform=Platform.CODEFORCES, problems_solved=45, rating_current=1400),
        ]
        overview = build_dashboard(records)

        self.assertEqual(overview["total_problems"], 165)
        self.assertEqual(overview["total_rating"], 3200)
        self.assertEqual(overview["platforms"], 2)

    def test_recent_activity_takes_last_days_per_platform(self):
        records = [
            PlatformStats(platform=Platform.LEETCODE, daily_activity=_activity(range(1, 11))),
            PlatformStats(platform=Platform.CODEFORCES, daily_activity=_activity([2, 12])),
        ]
        overview = build_dashboard(records, recent_days=7)

        recent = overview["recent_activity"]
        leetcode_days = [entry["date"] for entry in recent if entry["platform"] == Platform.LEETCODE]
        self.assertEqual(len(leetcode_days), 7)
        self.assertNotIn("2024-03-03", leetcode_days)
        self.assertEqual(recent[0], {
            "date": "2024-03-12",
            "problems_solved": 12,
            "submissions": 12,
            "platform": Platform.CODEFORCES,
        })
        dates = [entry["date"] for entry in recent]
        self.assertEqual(dates, sorted(dates, reverse=True))

    def test_no_records(self):
        self.assertEqual(build_dashboard([]), {
            "total_problems": 0,
            "total_rating": 0,
            "platforms": 0,
            "recent_activity": [],
        })


class GetDashboardTests(TestCase):
    def test_includes_per_platform_stats(self):
        user = User.objects.create_user(username="alice", password="pw")
        PlatformStats.objects.create(
            user=user,
            platform=Platform.CODEFORCES,
            handle="alice_cf",
            problems_solved=45,
            rating_current=1400,
        )

        data = get_dashboard(user.id)

        self.assertEqual(data["overview"]["total_problems"], 45)
        self.assertEqual(len(data["stats"]), 1)
        self.assertEqual(data["stats"][0]["handle"], "alice_cf")
