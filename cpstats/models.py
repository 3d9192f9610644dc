from django.db import models
from django.contrib.auth.models import User


class Platform(models.TextChoices):
    LEETCODE = 'leetcode', 'LeetCode'
    CODEFORCES = 'codeforces', 'Codeforces'


class Profile(models.Model):
    user = models.OneToOneField(User, on_delete=models.CASCADE, related_name='cp_profile')

    # Handles
    handle_leetcode = models.CharField(max_length=100, blank=True, null=True)
    handle_codeforces = models.CharField(max_length=100, blank=True, null=True)

    stats_synced_at = models.DateTimeField(null=True, blank=True)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def handle_for(self, platform: str) -> str | None:
        if platform == Platform.LEETCODE:
            return self.handle_leetcode
        if platform == Platform.CODEFORCES:
            return self.handle_codeforces
        return None

    def handles(self) -> list[tuple[str, str]]:
        """Configured (platform, handle) pairs, LeetCode first."""
        pairs = []
        for platform in (Platform.LEETCODE, Platform.CODEFORCES):
            handle = self.handle_for(platform)
            if handle:
                pairs.append((platform, handle))
        return pairs

    def __str__(self):
        return f"{self.user.username} (lc={self.handle_leetcode}, cf={self.handle_codeforces})"


class PlatformStats(models.Model):
    user = models.ForeignKey(User, on_delete=models.CASCADE, related_name='platform_stats')
    platform = models.CharField(max_length=20, choices=Platform.choices)
    handle = models.CharField(max_length=100)

    # Rating
    rating_current = models.IntegerField(default=0)
    rating_max = models.IntegerField(default=0)
    rating_history = models.JSONField(default=list, blank=True)

    # Problems
    problems_total = models.IntegerField(default=0)
    problems_solved = models.IntegerField(default=0)
    problems_attempted = models.IntegerField(default=0)
    solved_easy = models.IntegerField(default=0)
    solved_medium = models.IntegerField(default=0)
    solved_hard = models.IntegerField(default=0)
    problems_by_tag = models.JSONField(default=list, blank=True)

    # Contests
    contests_total = models.IntegerField(default=0)
    contests_best_rank = models.IntegerField(null=True, blank=True)
    contest_history = models.JSONField(default=list, blank=True)

    # Activity
    submissions = models.JSONField(default=list, blank=True)
    daily_activity = models.JSONField(default=list, blank=True, help_text="Sorted by date, one entry per day")

    last_updated = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['user', 'platform']
        constraints = [
            models.UniqueConstraint(
                fields=['user', 'platform'],
                name='platformstats_user_platform_uniq',
            ),
        ]
        verbose_name = "Platform Stats"
        verbose_name_plural = "Platform Stats"

    def __str__(self):
        return f"{self.user.username} - {self.platform} ({self.handle})"
