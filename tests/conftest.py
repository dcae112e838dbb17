from __future__ import annotations

import pytest


@pytest.fixture(autouse=True)
def no_sleep(monkeypatch):
    """Keep rate-limit pacing and backoff out of the test run."""
    sleeps = []
    monkeypatch.setattr("src.github.rate_limit.time.sleep", lambda s: sleeps.append(s))
    return sleeps
