"""
GraphQL client for the GitHub API with rate limiting and response caching.
"""
from __future__ import annotations

import json
import logging
import threading
from typing import Any, Dict, List, Optional

import requests
from cachetools import TTLCache

from .rate_limit import make_rate_limited_session, request_with_rate_limit

DEFAULT_GRAPHQL_URL = "https://api.github.com/graphql"
# Cache successful responses for 1 hour
DEFAULT_CACHE_TTL = 3600
DEFAULT_CACHE_SIZE = 100


class GraphQLError(Exception):
    """The GraphQL endpoint answered with an ``errors`` payload."""

    def __init__(self, errors: List[Dict[str, Any]]):
        messages = "; ".join(str(e.get("message", e)) for e in errors) or "unknown error"
        super().__init__(f"GraphQL query failed: {messages}")
        self.errors = errors


def graphql_url_for(api_url: str) -> str:
    """GraphQL endpoint for a REST base URL (github.com or GitHub Enterprise ``/api/v3``)."""
    base = api_url.rstrip('/')
    if base.endswith('/api/v3'):
        return base[: -len('/v3')] + '/graphql'
    return base + '/graphql'


class GraphQLClient:
    def __init__(
        self,
        token: Optional[str],
        api_url: str = DEFAULT_GRAPHQL_URL,
        session: Optional[requests.Session] = None,
        cache_ttl: int = DEFAULT_CACHE_TTL,
        cache_size: int = DEFAULT_CACHE_SIZE,
    ):
        self.api_url = api_url
        self.session = session or make_rate_limited_session(token)
        self.headers: Dict[str, str] = {"Content-Type": "application/json"}
        if token:
            self.headers["Authorization"] = f"bearer {token}"
        self._cache: TTLCache = TTLCache(maxsize=cache_size, ttl=cache_ttl)
        self._cache_lock = threading.Lock()
        self.logger = logging.getLogger("actions.github.graphql")

    def execute_query(self, query: str, variables: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        """
        Execute a GraphQL query.

        Args:
            query: The GraphQL query string
            variables: Dictionary of variables for the query

        Returns:
            The ``data`` member of the response

        Raises:
            requests.exceptions.RequestException: on transport or HTTP errors
            GraphQLError: if the response carries errors
        """
        cache_key = self._generate_cache_key(query, variables)
        with self._cache_lock:
            cached = self._cache.get(cache_key)
        if cached is not None:
            self.logger.debug("GraphQL cache hit")
            return cached

        payload: Dict[str, Any] = {"query": query}
        if variables:
            payload["variables"] = variables

        try:
            response = request_with_rate_limit(
                self.session, "POST", self.api_url,
                headers=self.headers, json=payload, timeout=30, logger=self.logger,
            )
            response.raise_for_status()
        except requests.exceptions.RequestException as e:
            self.logger.error(f"GraphQL query failed: {e}")
            if getattr(e, 'response', None) is not None:
                self.logger.error(f"Response: {e.response.text}")
            raise

        body = response.json() or {}
        if body.get("errors"):
            raise GraphQLError(body["errors"])
        data = body.get("data") or {}
        with self._cache_lock:
            self._cache[cache_key] = data
        return data

    @staticmethod
    def _generate_cache_key(query: str, variables: Optional[Dict[str, Any]] = None) -> str:
        key_parts = [query]
        if variables:
            key_parts.append(json.dumps(variables, sort_keys=True))
        return "|".join(key_parts)
