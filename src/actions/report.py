"""Assembly of report structures from aggregated usage.

Name and version ordering is applied here, once, after every workflow has
been folded in, so identical inputs always produce identical reports.
"""
from __future__ import annotations

from datetime import datetime
from typing import List, Optional, Sequence

from .aggregator import UsageAggregator
from .models import (
    ActionReport,
    ActionSummary,
    ComprehensiveReport,
    ComprehensiveSummary,
    RepositoryUsage,
    RepositoryWorkflows,
    ScanResult,
    SkippedWorkflow,
)
from .ordering import ordered_action_map, ordered_versions


def summarize_actions(aggregator: UsageAggregator) -> List[ActionSummary]:
    """Per-name usage rows sorted by name, each with versions sorted."""
    summaries = []
    for name, versions in ordered_action_map(aggregator.versions).items():
        summaries.append(ActionSummary(
            name=name,
            total_usages=sum(versions.values()),
            versions=ordered_versions(versions),
        ))
    return summaries


def build_scan_result(
    organization: str,
    repositories: Sequence[RepositoryWorkflows],
    process_time_seconds: float = 0.0,
) -> ScanResult:
    """Summarize workflow discovery; repositories without workflows are counted but not listed."""
    with_workflows = [r for r in repositories if r.workflows]
    return ScanResult(
        organization=organization,
        total_repositories=len(repositories),
        repositories_with_workflows=len(with_workflows),
        repositories=with_workflows,
        process_time_seconds=process_time_seconds,
    )


def build_action_report(
    organization: str,
    aggregator: UsageAggregator,
    total_workflows: int,
    skipped: Optional[Sequence[SkippedWorkflow]] = None,
    process_time_seconds: float = 0.0,
) -> ActionReport:
    return ActionReport(
        organization=organization,
        total_workflows=total_workflows,
        unique_actions=aggregator.unique_actions,
        unique_action_versions=aggregator.unique_action_versions,
        total_usages=aggregator.total_usages,
        actions_with_multiple_versions=aggregator.actions_with_multiple_versions,
        actions=summarize_actions(aggregator),
        most_used_action=aggregator.most_used(),
        skipped_workflows=list(skipped or []),
        process_time_seconds=process_time_seconds,
    )


def build_comprehensive_report(
    organization: str,
    started_at: datetime,
    repositories: Sequence[RepositoryUsage],
    aggregator: UsageAggregator,
    total_repositories: int,
    skipped: Optional[Sequence[SkippedWorkflow]] = None,
    process_time_seconds: float = 0.0,
) -> ComprehensiveReport:
    """Combine the repository breakdown with organization-wide statistics.

    Args:
        organization: Organization login
        started_at: When the scan started; rendered as RFC 3339
        repositories: Repositories that have at least one workflow file
        aggregator: Usage folded from every analyzed workflow
        total_repositories: All repositories seen, with or without workflows
        skipped: Workflows that could not be fetched or parsed
        process_time_seconds: Elapsed scan time

    Returns:
        The assembled ComprehensiveReport
    """
    summary = ComprehensiveSummary(
        total_repositories=total_repositories,
        repositories_with_workflows=len(repositories),
        total_workflows=sum(r.workflow_count for r in repositories),
        total_action_usages=aggregator.total_usages,
        unique_actions=aggregator.unique_actions,
        unique_action_versions=aggregator.unique_action_versions,
        actions_with_multiple_versions=aggregator.actions_with_multiple_versions,
        most_used_action=aggregator.most_used(),
    )
    return ComprehensiveReport(
        organization=organization,
        scan_timestamp=started_at.isoformat(timespec='seconds'),
        repositories=list(repositories),
        summary=summary,
        skipped_workflows=list(skipped or []),
        process_time_seconds=process_time_seconds,
    )
