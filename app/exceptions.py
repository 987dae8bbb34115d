"""
Exceptions for river data collection.
"""


class WaterDataError(Exception):
    """Base exception for river data errors."""

    pass


class UpstreamFetchError(WaterDataError):
    """Error fetching an upstream page (network failure or non-2xx status)."""

    def __init__(self, message: str, url: str, status_code: int | None = None):
        super().__init__(message)
        self.url = url
        self.status_code = status_code


class SourceParseError(WaterDataError):
    """Upstream page could not be parsed at all."""

    pass


class UnsupportedWindowError(WaterDataError, ValueError):
    """Requested time window is not offered for this kind of water body."""

    pass


class ConfigurationError(WaterDataError):
    """Settings file is missing or invalid."""

    pass
