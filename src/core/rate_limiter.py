"""Interpret GitHub throttling signals and fail fast.

This encapsulates simple GitHub-relevant logic:
- 429 responses are quota exhaustion; Retry-After is reported, not honored.
- 403 with X-RateLimit-Remaining==0 is primary quota exhaustion; X-RateLimit-Reset
  is reported so callers can tell the user when to try again.
- 403 with Retry-After, or whose message mentions a rate limit, is a secondary
  rate limit even while X-RateLimit-Remaining is non-zero.
Nothing here sleeps or retries.
"""

from __future__ import annotations

import time
from typing import Mapping, Optional

import httpx

from core.errors import RateLimitedError


class RateLimiter:
    # GitHub rate-limit detection
    def is_rate_limited(self, response: httpx.Response) -> bool:
        if response.status_code == 429:
            return True
        if response.status_code != 403:
            return False
        if response.headers.get("X-RateLimit-Remaining") == "0":
            return True
        if response.headers.get("Retry-After"):
            return True
        return "rate limit" in self._error_message(response).lower()

    def raise_if_limited(self, response: httpx.Response) -> None:
        if not self.is_rate_limited(response):
            return

        # Retry-After is specific to this response; X-RateLimit-Reset is the primary window
        retry_after = self._parse_int_header(response.headers, "Retry-After")
        if retry_after is not None:
            reset_at = int(time.time()) + retry_after
        else:
            reset_at = self._parse_int_header(response.headers, "X-RateLimit-Reset")

        if reset_at is not None:
            wait = max(0, reset_at - int(time.time()))
            message = f"GitHub API rate limit exceeded; try again in {wait}s"
        else:
            message = "GitHub API rate limit exceeded; try again later"
        raise RateLimitedError(message, reset_at=reset_at)

    def _error_message(self, response: httpx.Response) -> str:
        try:
            data = response.json()
        except ValueError:
            return ""
        if not isinstance(data, dict):
            return ""
        return str(data.get("message") or "")

    def _parse_int_header(self, headers: Mapping[str, str], name: str) -> Optional[int]:
        value = headers.get(name)
        if not value:
            return None
        value = value.strip()
        if not value.isdigit():
            return None
        return int(value)
