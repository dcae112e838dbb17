"""
Typed shapes of the GitHub GraphQL responses used for workflow discovery.
"""
from typing import List, Literal, Optional, TypedDict


class TreeEntry(TypedDict):
    """An entry of a git tree object."""
    name: str
    path: str
    type: Literal['blob', 'tree', 'commit']


class Tree(TypedDict):
    entries: List[TreeEntry]


class PageInfo(TypedDict):
    """Pagination information for GraphQL queries."""
    hasNextPage: bool
    endCursor: Optional[str]


class RepositoryNode(TypedDict):
    """A repository with its ``HEAD:.github/workflows`` tree (null when absent)."""
    name: str
    workflows: Optional[Tree]


class RepositoryConnection(TypedDict):
    """Repository connection type for GraphQL pagination."""
    pageInfo: PageInfo
    nodes: List[Optional[RepositoryNode]]
