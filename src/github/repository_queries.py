"""
GraphQL queries for repository and workflow discovery.
"""
from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Optional

from src.actions.models import RepositoryWorkflows

from .graphql_utils import GraphQLClient
from .models import RepositoryConnection, Tree

WORKFLOWS_DIR = ".github/workflows"
WORKFLOW_SUFFIXES = (".yml", ".yaml")

ORG_WORKFLOWS_QUERY = """
query OrgWorkflows($org: String!, $first: Int!, $after: String) {
  organization(login: $org) {
    repositories(first: $first, after: $after) {
      pageInfo {
        hasNextPage
        endCursor
      }
      nodes {
        name
        workflows: object(expression: "HEAD:.github/workflows") {
          ... on Tree {
            entries {
              name
              path
              type
            }
          }
        }
      }
    }
  }
}
"""


def workflow_paths(tree: Optional[Tree]) -> List[str]:
    """Paths of the YAML blobs in a ``.github/workflows`` tree object, in listing order."""
    entries = (tree or {}).get("entries") or []
    return [
        e["path"] for e in entries
        if e.get("type") == "blob" and str(e.get("name", "")).endswith(WORKFLOW_SUFFIXES)
    ]


class RepositoryQueries:
    def __init__(self, client: GraphQLClient, page_size: int = 50):
        self.client = client
        self.page_size = page_size
        self.logger = logging.getLogger("actions.github.queries")

    def get_organization_workflows_page(self, org: str, after: Optional[str] = None) -> RepositoryConnection:
        """
        Fetch one page of an organization's repositories with their workflow trees.

        Returns:
            The ``organization.repositories`` connection (``nodes`` and ``pageInfo``)

        Raises:
            ValueError: if the organization does not exist or is not visible
        """
        variables: Dict[str, Any] = {"org": org, "first": self.page_size}
        if after:
            variables["after"] = after
        data = self.client.execute_query(ORG_WORKFLOWS_QUERY, variables)
        organization = data.get("organization")
        if not organization:
            raise ValueError(f"Organization '{org}' not found or inaccessible")
        return organization.get("repositories") or {}

    def iter_organization_workflows(self, org: str) -> Iterator[RepositoryWorkflows]:
        """Yield every repository of ``org`` with its workflow file paths, following cursors."""
        cursor: Optional[str] = None
        page = 0
        while True:
            page += 1
            connection = self.get_organization_workflows_page(org, cursor)
            nodes = connection.get("nodes") or []
            self.logger.debug(f"Fetched repository page {page} for {org} ({len(nodes)} repositories)")
            for node in nodes:
                if not node:
                    continue
                yield RepositoryWorkflows(name=node["name"], workflows=workflow_paths(node.get("workflows")))

            page_info = connection.get("pageInfo") or {}
            if not page_info.get("hasNextPage"):
                break
            cursor = page_info.get("endCursor")
