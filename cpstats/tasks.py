import logging
import time

from celery import shared_task
from django.conf import settings
from django.db.models import Q
import redis

from .models import Profile
from .services.sync import fetch_and_update

logger = logging.getLogger(__name__)

_redis_client = None


def _get_redis_client():
    global _redis_client
    if _redis_client is None:
        url = getattr(settings, "CELERY_BROKER_URL", "redis://localhost:6379/0")
        _redis_client = redis.Redis.from_url(url)
    return _redis_client


def _acquire_lock(lock_key: str, ttl_seconds: int = 600) -> bool:
    try:
        client = _get_redis_client()
        return bool(client.set(lock_key, str(time.time()), nx=True, ex=ttl_seconds))
    except redis.RedisError:
        logger.exception("Lock failure for %s; continuing without lock.", lock_key)
        return True


def _release_lock(lock_key: str) -> None:
    try:
        _get_redis_client().delete(lock_key)
    except redis.RedisError:
        logger.exception("Could not release lock %s", lock_key)


@shared_task
def fetch_user_stats(user_id: int) -> dict:
    lock_key = f"fetch_user_stats:{user_id}"
    ttl = int(getattr(settings, "STATS_SYNC_LOCK_SECONDS", 600))
    if not _acquire_lock(lock_key, ttl_seconds=ttl):
        logger.info("Stats sync for user %s already running, skipping.", user_id)
        return {"skipped": "locked"}

    try:
        results = fetch_and_update(user_id)
    finally:
        _release_lock(lock_key)

    statuses = {platform: result["status"] for platform, result in results.items()}
    logger.info("Stats sync for user %s: %s", user_id, statuses)
    return statuses


@shared_task
def sync_all_users() -> str:
    user_ids = list(
        Profile.objects.filter(
            Q(handle_leetcode__isnull=False) & ~Q(handle_leetcode="")
            | Q(handle_codeforces__isnull=False) & ~Q(handle_codeforces="")
        ).values_list("user_id", flat=True)
    )
    for user_id in user_ids:
        fetch_user_stats.delay(user_id)

    return f"Queued stats sync for {len(user_ids)} users."
