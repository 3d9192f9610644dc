class StatsError(Exception):
    """Base class for errors raised while collecting platform statistics."""


class UpstreamUnavailable(StatsError):
    """The external platform could not be reached or answered with an error status."""

    def __init__(self, platform: str, message: str):
        self.platform = platform
        super().__init__(f"{platform}: {message}")


class UpstreamShapeError(UpstreamUnavailable):
    """The external platform answered, but not with the payload we expect."""


class PlatformUserNotFound(StatsError):
    def __init__(self, platform: str, handle: str):
        self.platform = platform
        self.handle = handle
        super().__init__(f"User '{handle}' not found on {platform}")


class InvalidRange(StatsError, ValueError):
    """Malformed year/month arguments for a contest range query."""
