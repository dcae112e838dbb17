"""
Organization scan driver.

Discovers workflow files through a :class:`WorkflowSource`, fetches and parses
them concurrently, then folds the extracted references into a
:class:`UsageAggregator` one workflow at a time in discovery order.
"""
from __future__ import annotations

import concurrent.futures
import logging
import time
from abc import ABC, abstractmethod
from datetime import datetime, timezone
from typing import Dict, List, Optional, Sequence, Tuple, Union

from .aggregator import UsageAggregator
from .exceptions import ActionLensError
from .extractor import WorkflowDocument, extract_actions
from .models import (
    ActionReference,
    ActionReport,
    ComprehensiveReport,
    RepositoryUsage,
    RepositoryWorkflows,
    ScanResult,
    SkippedWorkflow,
    WorkflowFile,
)
from .report import build_action_report, build_comprehensive_report, build_scan_result

SCAN_SCOPES = ('workflows', 'actions', 'all')

Report = Union[ScanResult, ActionReport, ComprehensiveReport]


class WorkflowSource(ABC):
    """Where repositories, workflow listings and workflow documents come from."""

    @abstractmethod
    def list_repositories(self, org: str) -> List[RepositoryWorkflows]:
        """Every repository of ``org`` with its workflow file paths (possibly none)."""

    @abstractmethod
    def fetch_workflow_document(self, org: str, repo: str, path: str) -> WorkflowDocument:
        """Fetch and parse one workflow file.

        Raises:
            WorkflowFetchError: if the file could not be retrieved
            WorkflowParseError: if the file is not valid YAML
        """

    def list_workflow_files(self, org: str) -> List[WorkflowFile]:
        return [
            WorkflowFile(repo=r.name, path=p)
            for r in self.list_repositories(org)
            for p in r.workflows
        ]


# (workflow, references or None, failure reason or None)
_FetchOutcome = Tuple[WorkflowFile, Optional[List[ActionReference]], Optional[str]]


class ActionScanner:
    """Runs workflow discovery and action analysis against one source."""

    def __init__(self, source: WorkflowSource, max_workers: int = 5) -> None:
        self.source = source
        self.max_workers = max(1, max_workers)
        self.logger = logging.getLogger('actions.scanner')

    def _load_references(self, org: str, wf: WorkflowFile) -> List[ActionReference]:
        document = self.source.fetch_workflow_document(org, wf.repo, wf.path)
        return extract_actions(document)

    def _fetch_all(self, org: str, workflows: Sequence[WorkflowFile]) -> List[_FetchOutcome]:
        """Fetch every workflow concurrently; outcomes are returned in input order."""
        outcomes: Dict[int, _FetchOutcome] = {}
        with concurrent.futures.ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            future_to_index = {
                executor.submit(self._load_references, org, wf): i
                for i, wf in enumerate(workflows)
            }
            for future in concurrent.futures.as_completed(future_to_index):
                i = future_to_index[future]
                wf = workflows[i]
                try:
                    outcomes[i] = (wf, future.result(), None)
                except ActionLensError as e:
                    self.logger.warning(f"Could not analyze {wf.repo}/{wf.path}: {e}")
                    outcomes[i] = (wf, None, str(e))
                except Exception as e:
                    self.logger.error(f"Unexpected error analyzing {wf.repo}/{wf.path}: {e}")
                    outcomes[i] = (wf, None, str(e))
        return [outcomes[i] for i in range(len(workflows))]

    def scan_workflows(self, org: str) -> ScanResult:
        """List repositories and their workflow files."""
        start = time.perf_counter()
        self.logger.info(f"Scanning organization: {org}")
        repositories = self.source.list_repositories(org)
        result = build_scan_result(org, repositories, time.perf_counter() - start)
        self.logger.info(
            f"Found {result.repositories_with_workflows} repositories with workflows "
            f"out of {result.total_repositories} total repositories"
        )
        return result

    def extract_actions(self, org: str) -> ActionReport:
        """Count action references across all workflow files of ``org``."""
        start = time.perf_counter()
        workflows = self.source.list_workflow_files(org)
        self.logger.info(f"Analyzing {len(workflows)} workflow files")

        aggregator = UsageAggregator()
        skipped: List[SkippedWorkflow] = []
        for wf, references, reason in self._fetch_all(org, workflows):
            if references is None:
                skipped.append(SkippedWorkflow(repo=wf.repo, path=wf.path, reason=reason or ''))
                continue
            aggregator.fold_workflow(wf.repo, wf.path, references)

        return build_action_report(
            org, aggregator, len(workflows), skipped, time.perf_counter() - start
        )

    def comprehensive_analysis(self, org: str) -> ComprehensiveReport:
        """Repository -> workflow -> action breakdown with organization totals."""
        started_at = datetime.now(timezone.utc)
        start = time.perf_counter()
        listings = self.source.list_repositories(org)
        with_workflows = [r for r in listings if r.workflows]
        workflows = [WorkflowFile(repo=r.name, path=p) for r in with_workflows for p in r.workflows]
        self.logger.info(
            f"Analyzing {len(workflows)} workflow files in {len(with_workflows)} repositories"
        )
        outcomes = self._fetch_all(org, workflows)

        aggregator = UsageAggregator()
        skipped: List[SkippedWorkflow] = []
        repositories: List[RepositoryUsage] = []
        position = 0
        for listing in with_workflows:
            repo_usage = RepositoryUsage(name=listing.name, workflow_count=len(listing.workflows))
            for wf, references, reason in outcomes[position:position + len(listing.workflows)]:
                if references is None:
                    skipped.append(SkippedWorkflow(repo=wf.repo, path=wf.path, reason=reason or ''))
                    continue
                usage = aggregator.fold_workflow(wf.repo, wf.path, references)
                repo_usage.workflows.append(usage)
                if usage.action_count == usage.total_action_count:
                    self.logger.info(f"{wf.repo} -> {wf.path} ({usage.action_count} actions)")
                else:
                    self.logger.info(
                        f"{wf.repo} -> {wf.path} ({usage.action_count} unique, "
                        f"{usage.total_action_count} total actions)"
                    )
            position += len(listing.workflows)
            repositories.append(repo_usage)

        return build_comprehensive_report(
            org,
            started_at,
            repositories,
            aggregator,
            total_repositories=len(listings),
            skipped=skipped,
            process_time_seconds=time.perf_counter() - start,
        )

    def run(self, org: str, scope: str = 'all', detailed: bool = False) -> List[Report]:
        """Run the scan selected by ``scope`` and return its reports in order.

        Raises:
            ValueError: if ``scope`` is not one of SCAN_SCOPES
        """
        if scope not in SCAN_SCOPES:
            raise ValueError(
                f"Invalid scan scope '{scope}'. Valid options: {', '.join(SCAN_SCOPES)}."
            )
        if scope == 'workflows':
            return [self.scan_workflows(org)]
        if detailed:
            return [self.comprehensive_analysis(org)]
        if scope == 'actions':
            return [self.extract_actions(org)]
        return [self.scan_workflows(org), self.extract_actions(org)]
