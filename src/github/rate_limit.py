"""
GitHub HTTP session helpers: retries, rate limit sleeps and request pacing.
"""
from __future__ import annotations

import logging
import os
import time
from typing import Any, Dict, Optional

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

DEFAULT_USER_AGENT = "action-lens"

# Delay before every API call, to avoid bursting through secondary rate limits
_DEFAULT_DELAY_SEC = float(os.getenv("GITHUB_REQ_DELAY", "0.1"))
# Attempts for 429/5xx and connection errors
_DEFAULT_MAX_ATTEMPTS = int(os.getenv("GITHUB_REQ_MAX_ATTEMPTS", "6"))
_DEFAULT_BACKOFF_BASE = float(os.getenv("GITHUB_REQ_BACKOFF_BASE", "1.7"))

_TRANSIENT_STATUSES = (429, 500, 502, 503, 504)


def make_rate_limited_session(
    token: Optional[str],
    user_agent: str = DEFAULT_USER_AGENT,
    pool_size: int = 10,
) -> requests.Session:
    """Create a requests Session with auth headers and urllib3 retries for idempotent calls.

    ``pool_size`` should be at least the number of threads sharing the session.
    """
    session = requests.Session()
    retry_strategy = Retry(
        total=3,
        backoff_factor=0.5,
        status_forcelist=list(_TRANSIENT_STATUSES),
        allowed_methods=["GET", "POST"],
        raise_on_status=False,
    )
    adapter = HTTPAdapter(max_retries=retry_strategy, pool_connections=pool_size, pool_maxsize=pool_size)
    session.mount("https://", adapter)
    session.mount("http://", adapter)
    headers: Dict[str, str] = {
        "Accept": "application/vnd.github.v3+json",
        "User-Agent": user_agent or DEFAULT_USER_AGENT,
    }
    if token:
        headers["Authorization"] = f"token {token}"
    session.headers.update(headers)
    return session


def rate_limit_sleep_seconds(resp: requests.Response, now: Optional[float] = None) -> Optional[float]:
    """Seconds to wait when ``resp`` reports an exhausted quota, otherwise None."""
    if resp.status_code not in (403, 429):
        return None
    try:
        remaining = int(resp.headers.get("X-RateLimit-Remaining", "1"))
        reset = int(resp.headers.get("X-RateLimit-Reset", "0"))
    except ValueError:
        return None
    if remaining != 0 or not reset:
        return None
    current = time.time() if now is None else now
    return max(0.0, reset - current + 2.0)


def _backoff_seconds(attempt: int, backoff_base: float) -> float:
    return backoff_base ** (attempt - 1)


def request_with_rate_limit(
    session: requests.Session,
    method: str,
    url: str,
    *,
    logger: Optional[logging.Logger] = None,
    min_delay_sec: float = _DEFAULT_DELAY_SEC,
    max_attempts: int = _DEFAULT_MAX_ATTEMPTS,
    backoff_base: float = _DEFAULT_BACKOFF_BASE,
    **kwargs: Any,
) -> requests.Response:
    """Perform a GitHub API request.

    - sleeps ``min_delay_sec`` before the first attempt
    - on an exhausted quota, sleeps until X-RateLimit-Reset and retries without
      counting the attempt
    - retries 429/5xx responses and connection errors with exponential backoff

    The last transient response is returned as-is so callers can
    ``raise_for_status()``; the last connection error is re-raised.
    """
    log = logger or logging.getLogger("actions.github.rate_limit")
    if min_delay_sec > 0:
        time.sleep(min_delay_sec)

    failures = 0
    while True:
        try:
            resp = session.request(method, url, **kwargs)
        except requests.RequestException as e:
            failures += 1
            if failures >= max_attempts:
                raise
            delay = _backoff_seconds(failures, backoff_base)
            log.warning(f"{method} {url} failed ({failures}/{max_attempts}): {e}; retrying in {delay:.1f}s")
            time.sleep(delay)
            continue

        wait = rate_limit_sleep_seconds(resp)
        if wait is not None:
            log.warning(f"Rate limit exhausted; waiting {wait:.1f}s for reset at {resp.headers.get('X-RateLimit-Reset')}")
            time.sleep(wait)
            continue

        if resp.status_code not in _TRANSIENT_STATUSES:
            return resp
        failures += 1
        if failures >= max_attempts:
            return resp
        delay = _backoff_seconds(failures, backoff_base)
        log.warning(f"{method} {url} returned {resp.status_code} ({failures}/{max_attempts}); retrying in {delay:.1f}s")
        time.sleep(delay)
