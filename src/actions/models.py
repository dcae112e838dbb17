"""
Data models for action usage inventories.
"""
from dataclasses import dataclass, field, asdict
from typing import Any, Dict, List, Optional


@dataclass(frozen=True)
class ActionReference:
    """One `uses:` reference split into action name and version."""
    name: str
    version: str

    def __str__(self) -> str:
        return f"{self.name}@{self.version}"


@dataclass
class WorkflowFile:
    """A workflow definition discovered in a repository."""
    repo: str
    path: str


@dataclass
class RepositoryWorkflows:
    """A repository and the workflow files found under .github/workflows."""
    name: str
    workflows: List[str] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {'name': self.name, 'workflows': list(self.workflows)}


@dataclass
class SkippedWorkflow:
    """A workflow that contributed no references because it could not be read."""
    repo: str
    path: str
    reason: str

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ActionUsage:
    """Occurrences of one (name, version) pair inside a single workflow."""
    name: str
    version: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class WorkflowUsage:
    """Action usage of one workflow file.

    ``action_count`` is the number of distinct (name, version) pairs and
    ``total_action_count`` the number of occurrences; they differ whenever an
    action is referenced more than once in the same file.
    """
    path: str
    action_count: int = 0
    total_action_count: int = 0
    actions: List[ActionUsage] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'path': self.path,
            'action_count': self.action_count,
            'total_action_count': self.total_action_count,
            'actions': [a.to_dict() for a in self.actions],
        }


@dataclass
class RepositoryUsage:
    """Workflows of one repository with their action usage."""
    name: str
    workflow_count: int = 0
    workflows: List[WorkflowUsage] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'workflow_count': self.workflow_count,
            'workflows': [w.to_dict() for w in self.workflows],
        }


@dataclass
class VersionUsage:
    version: str
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ActionSummary:
    """Organization-wide usage of one action name across all versions."""
    name: str
    total_usages: int
    versions: List[VersionUsage] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            'name': self.name,
            'total_usages': self.total_usages,
            'versions': [v.to_dict() for v in self.versions],
        }


@dataclass
class MostUsedAction:
    name: str
    total_usages: int
    repositories_using: int
    workflows_using: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass
class ScanResult:
    """Workflow discovery results for an organization."""
    organization: str
    total_repositories: int = 0
    repositories_with_workflows: int = 0
    repositories: List[RepositoryWorkflows] = field(default_factory=list)
    process_time_seconds: float = 0.0

    kind = 'workflows'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'organization': self.organization,
            'total_repositories': self.total_repositories,
            'repositories_with_workflows': self.repositories_with_workflows,
            'repositories': [r.to_dict() for r in self.repositories],
            'process_time_seconds': self.process_time_seconds,
        }


@dataclass
class ActionReport:
    """Action references across all workflows, grouped by name and version."""
    organization: str
    total_workflows: int = 0
    unique_actions: int = 0
    unique_action_versions: int = 0
    total_usages: int = 0
    actions_with_multiple_versions: int = 0
    actions: List[ActionSummary] = field(default_factory=list)
    most_used_action: Optional[MostUsedAction] = None
    skipped_workflows: List[SkippedWorkflow] = field(default_factory=list)
    process_time_seconds: float = 0.0

    kind = 'actions'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'organization': self.organization,
            'total_workflows': self.total_workflows,
            'unique_actions': self.unique_actions,
            'unique_action_versions': self.unique_action_versions,
            'total_usages': self.total_usages,
            'actions_with_multiple_versions': self.actions_with_multiple_versions,
            'actions': [a.to_dict() for a in self.actions],
            'most_used_action': self.most_used_action.to_dict() if self.most_used_action else None,
            'skipped_workflows': [s.to_dict() for s in self.skipped_workflows],
            'process_time_seconds': self.process_time_seconds,
        }


@dataclass
class ComprehensiveSummary:
    total_repositories: int = 0
    repositories_with_workflows: int = 0
    total_workflows: int = 0
    total_action_usages: int = 0
    unique_actions: int = 0
    unique_action_versions: int = 0
    actions_with_multiple_versions: int = 0
    most_used_action: Optional[MostUsedAction] = None

    def to_dict(self) -> Dict[str, Any]:
        result = asdict(self)
        result['most_used_action'] = self.most_used_action.to_dict() if self.most_used_action else None
        return result


@dataclass
class ComprehensiveReport:
    """Repository -> workflow -> action breakdown with organization totals."""
    organization: str
    scan_timestamp: str
    repositories: List[RepositoryUsage] = field(default_factory=list)
    summary: ComprehensiveSummary = field(default_factory=ComprehensiveSummary)
    skipped_workflows: List[SkippedWorkflow] = field(default_factory=list)
    process_time_seconds: float = 0.0

    kind = 'detailed'

    def to_dict(self) -> Dict[str, Any]:
        return {
            'organization': self.organization,
            'scan_timestamp': self.scan_timestamp,
            'repositories': [r.to_dict() for r in self.repositories],
            'summary': self.summary.to_dict(),
            'skipped_workflows': [s.to_dict() for s in self.skipped_workflows],
            'process_time_seconds': self.process_time_seconds,
        }
