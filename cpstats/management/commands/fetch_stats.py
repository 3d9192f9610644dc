from django.core.management.base import BaseCommand, CommandError

from cpstats.models import Profile
from cpstats.services.sync import fetch_and_update


class Command(BaseCommand):
    help = "Fetch LeetCode/Codeforces stats and store the normalized records."

    def add_arguments(self, parser):
        group = parser.add_mutually_exclusive_group()
        group.add_argument(
            "--user-id",
            type=int,
            help="Only refresh this user.",
        )
        group.add_argument(
            "--username",
            help="Only refresh the user with this username.",
        )

    def handle(self, *args, **options):
        user_id = options.get("user_id")
        username = options.get("username")

        qs = Profile.objects.select_related("user")
        if user_id:
            qs = qs.filter(user_id=user_id)
        elif username:
            qs = qs.filter(user__username=username)

        profiles = list(qs)
        if (user_id or username) and not profiles:
            raise CommandError("No profile found for that user.")

        refreshed = 0
        for profile in profiles:
            if not profile.handles():
                continue
            results = fetch_and_update(profile.user_id)
            for platform, result in results.items():
                line = f"{profile.user.username} {platform}: {result['status']}"
                if result["status"] == "ok":
                    self.stdout.write(self.style.SUCCESS(line))
                else:
                    self.stdout.write(self.style.WARNING(f"{line} ({result['error']})"))
            refreshed += 1

        self.stdout.write(self.style.SUCCESS(f"Stats refresh finished for {refreshed} users."))
