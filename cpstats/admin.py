from django.contrib import admin, messages

from .models import PlatformStats, Profile
from .tasks import fetch_user_stats

admin.site.site_header = "CP Mate Administration"
admin.site.site_title = "CP Mate Admin"
admin.site.index_title = "Statistics"


@admin.register(Profile)
class ProfileAdmin(admin.ModelAdmin):
    list_display = ('user', 'handle_leetcode', 'handle_codeforces', 'stats_synced_at')
    search_fields = ('user__username', 'handle_leetcode', 'handle_codeforces')
    readonly_fields = ('stats_synced_at', 'created_at', 'updated_at')
    actions = ['queue_stats_sync']

    def queue_stats_sync(self, request, queryset):
        user_ids = list(queryset.values_list('user_id', flat=True))
        for user_id in user_ids:
            fetch_user_stats.delay(user_id)
        self.message_user(request, f"Queued stats sync for {len(user_ids)} user(s).", level=messages.SUCCESS)

    queue_stats_sync.short_description = "Queue stats sync"


@admin.register(PlatformStats)
class PlatformStatsAdmin(admin.ModelAdmin):
    """
    Read-mostly view of the normalized records; they are rewritten on every fetch.
    """

    list_display = (
        'user',
        'platform',
        'handle',
        'rating_current',
        'rating_max',
        'problems_solved',
        'contests_total',
        'last_updated',
    )
    list_filter = ('platform',)
    search_fields = ('user__username', 'handle')
    readonly_fields = ('last_updated', 'created_at', 'updated_at')
