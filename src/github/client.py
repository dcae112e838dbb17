"""GitHub REST client with rate limiting and response caching."""
from __future__ import annotations

import base64
import binascii
import logging
import os
import threading
from typing import Any, Dict, Optional
from urllib.parse import quote, urljoin

import requests
from cachetools import TTLCache
from cachetools.keys import hashkey

from .rate_limit import DEFAULT_USER_AGENT, make_rate_limited_session, request_with_rate_limit

# Default cache TTL in seconds (1 hour)
DEFAULT_CACHE_TTL = 3600
# Default cache max size (1000 items)
DEFAULT_CACHE_SIZE = 1000


class BaseGitHubClient:
    """Session, caching and context management shared by GitHub REST clients."""

    def __init__(
        self,
        token: Optional[str] = None,
        base_url: str = "https://api.github.com",
        cache_ttl: int = DEFAULT_CACHE_TTL,
        cache_size: int = DEFAULT_CACHE_SIZE,
        user_agent: str = DEFAULT_USER_AGENT,
        session: Optional[requests.Session] = None,
        pool_size: int = 10,
    ) -> None:
        """Initialize the GitHub client.

        Args:
            token: GitHub personal access token; falls back to GITHUB_TOKEN, then GH_TOKEN
            base_url: Base URL for the GitHub API
            cache_ttl: Cache TTL in seconds
            cache_size: Maximum number of responses to cache
            user_agent: User agent string for API requests
            session: Pre-configured session, mostly for tests
            pool_size: Connection pool size; at least the number of threads sharing the client
        """
        self.token = token or os.getenv("GITHUB_TOKEN") or os.getenv("GH_TOKEN")
        self.base_url = base_url.rstrip('/')
        self.logger = logging.getLogger(f"actions.github.{self.__class__.__name__}")
        self._cache: TTLCache = TTLCache(maxsize=cache_size, ttl=cache_ttl)
        self._cache_lock = threading.Lock()
        self.session = session or make_rate_limited_session(
            self.token, user_agent=user_agent, pool_size=pool_size
        )

    def _make_cache_key(self, method: str, url: str, **kwargs) -> str:
        sorted_kwargs = tuple(sorted((k, repr(v)) for k, v in kwargs.items()))
        return str(hashkey(method, url, sorted_kwargs))

    def _cached_request(self, method: str, url: str, **kwargs) -> requests.Response:
        """Make a request, serving repeated successful GETs from the cache."""
        cache_key = self._make_cache_key(method, url, **kwargs)
        with self._cache_lock:
            cached = self._cache.get(cache_key)
        if cached is not None:
            self.logger.debug(f"Cache hit for {method} {url}")
            return cached

        self.logger.debug(f"Cache miss for {method} {url}")
        kwargs.setdefault('timeout', 30)
        response = request_with_rate_limit(self.session, method, url, logger=self.logger, **kwargs)
        if response.status_code == 200:
            with self._cache_lock:
                self._cache[cache_key] = response
        return response

    def get(self, path: str, **kwargs) -> requests.Response:
        """Make a GET request to the GitHub API."""
        url = urljoin(f"{self.base_url}/", path.lstrip('/'))
        return self._cached_request('GET', url, **kwargs)

    def close(self) -> None:
        self.session.close()

    def __enter__(self) -> 'BaseGitHubClient':
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()


class GitHubClient(BaseGitHubClient):
    """REST calls used by the action inventory."""

    def get_authenticated_user(self) -> Dict[str, Any]:
        """Get the user the token belongs to."""
        response = self.get("user")
        response.raise_for_status()
        return response.json()

    def get_file_content(self, owner: str, repo: str, path: str, ref: Optional[str] = None) -> str:
        """Get the decoded text of a file through the contents API.

        Raises:
            requests.exceptions.HTTPError: on a non-2xx response
            ValueError: if the payload is not a file or cannot be decoded
        """
        params = {'ref': ref} if ref else None
        response = self.get(f"repos/{owner}/{repo}/contents/{quote(path)}", params=params)
        response.raise_for_status()
        data = response.json()
        if not isinstance(data, dict) or 'content' not in data:
            raise ValueError(f"{path} is not a file")

        content = data.get('content') or ''
        if data.get('encoding') != 'base64':
            return content
        try:
            return base64.b64decode(content).decode('utf-8')
        except (binascii.Error, UnicodeDecodeError) as e:
            raise ValueError(f"failed to decode base64 content: {e}") from e
