import json
import logging

from django.contrib.auth.decorators import login_required
from django.http import Http404, JsonResponse
from django.utils import timezone
from django.views.decorators.http import require_GET, require_http_methods, require_POST

from .exceptions import InvalidRange, UpstreamUnavailable
from .models import Platform, PlatformStats, Profile
from .services.api_client import LeetCodeClient
from .services.contest_catalog import get_leetcode_rating_timeline, get_upcoming_contests
from .services.dashboard import get_dashboard
from .services.stats_store import find_all, record_daily_activity, stats_to_dict
from .services.sync import fetch_and_update

logger = logging.getLogger(__name__)


def _error(message: str, status: int) -> JsonResponse:
    return JsonResponse({"error": message}, status=status)


def _json_body(request) -> dict | None:
    try:
        body = json.loads(request.body or b"{}")
    except ValueError:
        return None
    return body if isinstance(body, dict) else None


def _sanitize_handle(handle) -> str | None:
    if handle is None:
        return None
    cleaned = str(handle).strip()
    return cleaned or None


def _get_profile(request) -> Profile:
    profile, _ = Profile.objects.get_or_create(user=request.user)
    return profile


def _handles_payload(profile: Profile) -> dict:
    return {
        "leetcode": profile.handle_leetcode,
        "codeforces": profile.handle_codeforces,
    }


@require_GET
def health(request):
    return JsonResponse({"status": "OK", "message": "CP Mate server is running"})


@login_required
@require_http_methods(["GET", "POST"])
def handles_view(request):
    profile = _get_profile(request)
    if request.method == "POST":
        body = _json_body(request)
        if body is None:
            return _error("Invalid JSON body.", 400)
        if "leetcode" in body:
            profile.handle_leetcode = _sanitize_handle(body.get("leetcode"))
        if "codeforces" in body:
            profile.handle_codeforces = _sanitize_handle(body.get("codeforces"))
        profile.save()
    return JsonResponse({"handles": _handles_payload(profile)})


@login_required
@require_GET
def stats_list(request):
    records = find_all(request.user.id)
    return JsonResponse({"stats": [stats_to_dict(record) for record in records]})


@login_required
@require_POST
def stats_fetch(request):
    profile = _get_profile(request)
    if not profile.handles():
        return _error("No platform handles configured.", 400)

    results = fetch_and_update(request.user.id)
    return JsonResponse({"message": "Stats fetched", "results": results})


@login_required
@require_GET
def dashboard(request):
    return JsonResponse(get_dashboard(request.user.id))


@login_required
@require_POST
def daily_activity(request, platform: str):
    if platform not in Platform.values:
        raise Http404("Unknown platform.")

    body = _json_body(request)
    if body is None:
        return _error("Invalid JSON body.", 400)

    try:
        record = record_daily_activity(
            request.user.id,
            platform,
            body.get("date") or timezone.now().date(),
            int(body.get("problems_solved") or 0),
            int(body.get("submissions") or 0),
        )
    except PlatformStats.DoesNotExist:
        return _error(f"No {platform} stats yet; fetch them first.", 404)
    except (TypeError, ValueError) as exc:
        return _error(str(exc), 400)

    return JsonResponse({"activity": {"daily_activity": record.daily_activity}})


@login_required
@require_GET
def upcoming_contests(request):
    try:
        payload = get_upcoming_contests(
            year=request.GET.get("year"),
            month=request.GET.get("month"),
        )
    except InvalidRange as exc:
        return _error(str(exc), 400)
    return JsonResponse(payload)


@login_required
@require_GET
def leetcode_contest_ranking(request, username: str):
    try:
        data = LeetCodeClient.get_contest_ranking(username)
    except UpstreamUnavailable as exc:
        logger.warning("LeetCode contest ranking failed for %s: %s", username, exc)
        return _error("Failed to fetch data from LeetCode", 502)
    return JsonResponse(data)


@login_required
@require_GET
def leetcode_rating_history(request, username: str):
    try:
        timeline = get_leetcode_rating_timeline(username)
    except UpstreamUnavailable as exc:
        logger.warning("LeetCode rating timeline failed for %s: %s", username, exc)
        return _error("Failed to fetch data from LeetCode", 502)
    return JsonResponse({"timeline": timeline})
