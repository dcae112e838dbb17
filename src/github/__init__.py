"""GitHub collaborators for the action inventory.

REST and GraphQL clients with built-in rate limiting, retries and caching, and
the workflow sources the scanner reads from.

Example usage:
    ```python
    from src.github import GitHubClient, GitHubWorkflowSource

    client = GitHubClient(token="your_github_token")
    user = client.get_authenticated_user()

    source = GitHubWorkflowSource(client=client)
    repos = source.list_repositories("org-name")
    ```
"""
from .client import BaseGitHubClient, GitHubClient
from .graphql_utils import GraphQLClient, GraphQLError, graphql_url_for
from .models import PageInfo, RepositoryConnection, RepositoryNode, Tree, TreeEntry
from .rate_limit import make_rate_limited_session, rate_limit_sleep_seconds, request_with_rate_limit
from .repository_queries import RepositoryQueries, workflow_paths
from .source import GitHubWorkflowSource, LocalWorkflowSource

__all__ = [
    'BaseGitHubClient',
    'GitHubClient',
    'GraphQLClient',
    'GraphQLError',
    'graphql_url_for',
    'PageInfo',
    'RepositoryConnection',
    'RepositoryNode',
    'Tree',
    'TreeEntry',
    'make_rate_limited_session',
    'rate_limit_sleep_seconds',
    'request_with_rate_limit',
    'RepositoryQueries',
    'workflow_paths',
    'GitHubWorkflowSource',
    'LocalWorkflowSource',
]
