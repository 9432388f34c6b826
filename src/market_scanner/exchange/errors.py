"""Exchange client errors."""

from __future__ import annotations


class ExchangeError(Exception):
    """The exchange answered, but not with something we can use."""


class MalformedPayloadError(ExchangeError):
    """Response body did not have the expected shape."""

    def __init__(self, endpoint: str, detail: str) -> None:
        super().__init__(f"{endpoint}: {detail}")
        self.endpoint = endpoint
        self.detail = detail


class RateLimitedError(ExchangeError):
    """The exchange throttled us (429) or banned the IP (418)."""

    def __init__(self, status_code: int, retry_after_s: float) -> None:
        super().__init__(f"rate limited with {status_code}, retry after {retry_after_s:g}s")
        self.status_code = status_code
        self.retry_after_s = retry_after_s
