import logging

from django.utils import timezone

from cpstats.exceptions import PlatformUserNotFound, UpstreamUnavailable
from cpstats.models import Platform, Profile
from cpstats.services.api_client import CLIENTS
from cpstats.services.normalize import normalize
from cpstats.services.stats_store import merge_and_persist, stats_to_dict

logger = logging.getLogger(__name__)


def fetch_platform(user_id: int, platform: str, handle: str) -> dict:
    """Fetch, normalize and store one platform; errors become a status entry."""
    try:
        payload = CLIENTS[Platform(platform)].fetch_stats(handle)
        fragment = normalize(platform, payload)
        record = merge_and_persist(user_id, platform, fragment)
    except PlatformUserNotFound as exc:
        logger.warning("Handle %s not found on %s for user %s", handle, platform, user_id)
        return {"status": "not_found", "handle": handle, "error": str(exc)}
    except UpstreamUnavailable as exc:
        logger.warning("Could not fetch %s stats for %s (user %s): %s", platform, handle, user_id, exc)
        return {"status": "unavailable", "handle": handle, "error": str(exc)}

    return {"status": "ok", "handle": handle, "stats": stats_to_dict(record)}


def fetch_and_update(user_id: int) -> dict:
    """
    Refresh every platform the user has a handle for. One platform failing
    never stops the other.
    """
    profile = Profile.objects.filter(user_id=user_id).first()
    if not profile:
        return {}

    results = {}
    for platform, handle in profile.handles():
        results[str(platform)] = fetch_platform(user_id, platform, handle)

    if any(result["status"] == "ok" for result in results.values()):
        profile.stats_synced_at = timezone.now()
        profile.save(update_fields=["stats_synced_at", "updated_at"])
    return results
