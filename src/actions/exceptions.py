"""Exceptions raised at the edges of the action usage pipeline."""


class ActionLensError(Exception):
    """Base class for action-lens errors."""


class WorkflowFetchError(ActionLensError):
    """A workflow file could not be retrieved from its content source."""

    def __init__(self, repo: str, path: str, reason: str) -> None:
        super().__init__(f"{repo}/{path}: {reason}")
        self.repo = repo
        self.path = path
        self.reason = reason


class WorkflowParseError(ActionLensError):
    """A workflow file was retrieved but is not valid YAML."""
