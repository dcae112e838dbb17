"""Tests for src.github.rate_limit."""

from __future__ import annotations

import pytest
import requests

from src.github.rate_limit import make_rate_limited_session, rate_limit_sleep_seconds, request_with_rate_limit
from tests._fixtures.sources import FakeSession, make_response


def test_session_carries_auth_and_user_agent() -> None:
    session = make_rate_limited_session("abc123", user_agent="action-lens-test")

    assert session.headers["Authorization"] == "token abc123"
    assert session.headers["User-Agent"] == "action-lens-test"
    assert session.headers["Accept"] == "application/vnd.github.v3+json"


def test_session_without_token_has_no_auth_header() -> None:
    assert "Authorization" not in make_rate_limited_session(None).headers


def test_rate_limit_sleep_only_when_quota_exhausted() -> None:
    exhausted = make_response(403, headers={"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1010"})
    forbidden = make_response(403, headers={"X-RateLimit-Remaining": "12", "X-RateLimit-Reset": "1010"})

    assert rate_limit_sleep_seconds(exhausted, now=1000.0) == pytest.approx(12.0)
    assert rate_limit_sleep_seconds(forbidden, now=1000.0) is None
    assert rate_limit_sleep_seconds(make_response(200), now=1000.0) is None


def test_request_retries_transient_status(no_sleep) -> None:
    session = FakeSession([make_response(502), make_response(200, {"ok": True})])

    resp = request_with_rate_limit(session, "GET", "https://api.github.com/x", min_delay_sec=0)

    assert resp.status_code == 200
    assert len(session.calls) == 2
    assert no_sleep == [1.0]


def test_request_returns_last_transient_response_when_attempts_run_out() -> None:
    session = FakeSession([make_response(503), make_response(503)])

    resp = request_with_rate_limit(session, "GET", "https://api.github.com/x", min_delay_sec=0, max_attempts=2)

    assert resp.status_code == 503


def test_request_sleeps_until_reset_without_spending_attempts(no_sleep) -> None:
    limited = make_response(403, headers={"X-RateLimit-Remaining": "0", "X-RateLimit-Reset": "1"})
    session = FakeSession([limited, make_response(200)])

    resp = request_with_rate_limit(session, "GET", "https://api.github.com/x", min_delay_sec=0, max_attempts=1)

    assert resp.status_code == 200
    assert len(no_sleep) == 1


def test_request_reraises_connection_errors_after_last_attempt() -> None:
    session = FakeSession([requests.ConnectionError("boom"), requests.ConnectionError("boom")])

    with pytest.raises(requests.ConnectionError):
        request_with_rate_limit(session, "GET", "https://api.github.com/x", min_delay_sec=0, max_attempts=2)
