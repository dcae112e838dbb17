"""
Workflow sources: the GitHub API, or a local directory of repository checkouts.
"""
from __future__ import annotations

import logging
import os
from glob import glob
from typing import List, Optional

import requests

from src.actions.exceptions import WorkflowFetchError
from src.actions.extractor import WorkflowDocument, parse_workflow_document
from src.actions.models import RepositoryWorkflows
from src.actions.scanner import WorkflowSource

from .client import GitHubClient
from .graphql_utils import GraphQLClient, graphql_url_for
from .repository_queries import WORKFLOW_SUFFIXES, WORKFLOWS_DIR, RepositoryQueries


class GitHubWorkflowSource(WorkflowSource):
    """Discovers workflows with GraphQL and fetches their content over REST."""

    def __init__(
        self,
        token: Optional[str] = None,
        api_url: str = "https://api.github.com",
        client: Optional[GitHubClient] = None,
        queries: Optional[RepositoryQueries] = None,
        pool_size: int = 10,
    ) -> None:
        self.client = client or GitHubClient(token=token, base_url=api_url, pool_size=pool_size)
        self.queries = queries or RepositoryQueries(
            GraphQLClient(self.client.token, api_url=graphql_url_for(api_url), session=self.client.session)
        )
        self.logger = logging.getLogger("actions.github.source")

    def list_repositories(self, org: str) -> List[RepositoryWorkflows]:
        repositories = list(self.queries.iter_organization_workflows(org))
        self.logger.debug(f"Discovered {len(repositories)} repositories in {org}")
        return repositories

    def fetch_workflow_document(self, org: str, repo: str, path: str) -> WorkflowDocument:
        try:
            text = self.client.get_file_content(org, repo, path)
        except requests.exceptions.HTTPError as e:
            status = e.response.status_code if e.response is not None else "unknown"
            raise WorkflowFetchError(repo, path, f"API request failed with status {status}") from e
        except (requests.exceptions.RequestException, ValueError) as e:
            raise WorkflowFetchError(repo, path, str(e)) from e
        return parse_workflow_document(text)


class LocalWorkflowSource(WorkflowSource):
    """Reads workflows from ``<root>/<repo>/.github/workflows`` for every directory under ``root``.

    The organization name is not used for lookups; ``root`` is assumed to hold
    the checkouts of a single organization.
    """

    def __init__(self, root: str) -> None:
        self.root = os.path.abspath(root)
        self.logger = logging.getLogger("actions.local.source")

    def list_repositories(self, org: str) -> List[RepositoryWorkflows]:
        if not os.path.isdir(self.root):
            raise FileNotFoundError(f"Local checkout directory not found: {self.root}")
        repositories: List[RepositoryWorkflows] = []
        for name in sorted(os.listdir(self.root)):
            repo_path = os.path.join(self.root, name)
            if not os.path.isdir(repo_path) or name.startswith('.'):
                continue
            workflows_dir = os.path.join(repo_path, WORKFLOWS_DIR)
            files: List[str] = []
            if os.path.isdir(workflows_dir):
                for suffix in WORKFLOW_SUFFIXES:
                    files.extend(
                        p for p in glob(os.path.join(workflows_dir, f"*{suffix}")) if os.path.isfile(p)
                    )
            paths = sorted(os.path.relpath(p, repo_path).replace(os.sep, '/') for p in files)
            repositories.append(RepositoryWorkflows(name=name, workflows=paths))
        return repositories

    def fetch_workflow_document(self, org: str, repo: str, path: str) -> WorkflowDocument:
        file_path = os.path.join(self.root, repo, *path.split('/'))
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            raise WorkflowFetchError(repo, path, str(e)) from e
        return parse_workflow_document(text)
