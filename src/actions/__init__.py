"""GitHub Actions usage inventory.

Extracts ``uses:`` references from workflow documents and folds them into
per-workflow, per-repository and organization-wide usage statistics.

Example usage:
    ```python
    from src.actions import ActionScanner
    from src.github import GitHubWorkflowSource

    source = GitHubWorkflowSource(token="your_github_token")
    report = ActionScanner(source).comprehensive_analysis("org-name")
    ```
"""
from .aggregator import UsageAggregator, count_workflow, workflow_usage
from .exceptions import ActionLensError, WorkflowFetchError, WorkflowParseError
from .extractor import extract_actions, iter_uses, parse_workflow_document, split_reference
from .models import (
    ActionReference,
    ActionReport,
    ActionSummary,
    ActionUsage,
    ComprehensiveReport,
    ComprehensiveSummary,
    MostUsedAction,
    RepositoryUsage,
    RepositoryWorkflows,
    ScanResult,
    SkippedWorkflow,
    VersionUsage,
    WorkflowFile,
    WorkflowUsage,
)
from .report import build_action_report, build_comprehensive_report, build_scan_result, summarize_actions
from .scanner import SCAN_SCOPES, ActionScanner, WorkflowSource

__all__ = [
    'ActionLensError',
    'WorkflowFetchError',
    'WorkflowParseError',
    'ActionReference',
    'ActionReport',
    'ActionSummary',
    'ActionUsage',
    'ComprehensiveReport',
    'ComprehensiveSummary',
    'MostUsedAction',
    'RepositoryUsage',
    'RepositoryWorkflows',
    'ScanResult',
    'SkippedWorkflow',
    'VersionUsage',
    'WorkflowFile',
    'WorkflowUsage',
    'UsageAggregator',
    'count_workflow',
    'workflow_usage',
    'extract_actions',
    'iter_uses',
    'parse_workflow_document',
    'split_reference',
    'build_action_report',
    'build_comprehensive_report',
    'build_scan_result',
    'summarize_actions',
    'SCAN_SCOPES',
    'ActionScanner',
    'WorkflowSource',
]
