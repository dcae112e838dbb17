"""
Folding of per-workflow action references into organization-wide usage counts.
"""
from __future__ import annotations

from collections import Counter
from typing import Dict, Iterable, List, Mapping, Optional, Set

from .models import ActionReference, MostUsedAction, WorkflowUsage
from .ordering import ordered_usages

UsageCount = Counter  # ActionReference -> occurrences within one workflow


def count_workflow(references: Iterable[ActionReference]) -> UsageCount:
    """Count occurrences of each (name, version) pair in one workflow."""
    return Counter(references)


def workflow_usage(path: str, counts: Mapping[ActionReference, int]) -> WorkflowUsage:
    """Build the ordered per-workflow record for ``counts``."""
    return WorkflowUsage(
        path=path,
        action_count=len(counts),
        total_action_count=sum(counts.values()),
        actions=ordered_usages(counts),
    )


class UsageAggregator:
    """Organization-wide accumulator for one scan.

    Keeps, per action name, the occurrence count of each version, the set of
    repositories referencing it, and the number of workflow usages. Names are
    remembered in the order they were first folded in; that order only
    matters for breaking ties in :meth:`most_used`.

    The aggregator is not thread-safe. Concurrent scans should build one
    aggregator per worker and combine them with :meth:`merge`.
    """

    def __init__(self) -> None:
        self.versions: Dict[str, Dict[str, int]] = {}
        self.repositories: Dict[str, Set[str]] = {}
        self.workflow_usages: Dict[str, int] = {}

    def add_counts(self, repo: str, counts: Mapping[ActionReference, int]) -> None:
        """Fold one workflow's counts, attributed to ``repo``."""
        for ref, count in counts.items():
            if count < 1:
                continue
            versions = self.versions.setdefault(ref.name, {})
            versions[ref.version] = versions.get(ref.version, 0) + count
            self.repositories.setdefault(ref.name, set()).add(repo)
            self.workflow_usages[ref.name] = self.workflow_usages.get(ref.name, 0) + count

    def fold_workflow(self, repo: str, path: str, references: Iterable[ActionReference]) -> WorkflowUsage:
        """Count the references of one workflow, fold them in and return the workflow record."""
        counts = count_workflow(references)
        self.add_counts(repo, counts)
        return workflow_usage(path, counts)

    def merge(self, other: 'UsageAggregator') -> 'UsageAggregator':
        """Add the contents of ``other`` into this aggregator and return it."""
        for name, versions in other.versions.items():
            mine = self.versions.setdefault(name, {})
            for version, count in versions.items():
                mine[version] = mine.get(version, 0) + count
            self.repositories.setdefault(name, set()).update(other.repositories.get(name, ()))
            self.workflow_usages[name] = self.workflow_usages.get(name, 0) + other.workflow_usages.get(name, 0)
        return self

    def action_total(self, name: str) -> int:
        return sum(self.versions.get(name, {}).values())

    @property
    def action_names(self) -> List[str]:
        return list(self.versions)

    @property
    def unique_actions(self) -> int:
        return len(self.versions)

    @property
    def unique_action_versions(self) -> int:
        return sum(len(v) for v in self.versions.values())

    @property
    def total_usages(self) -> int:
        return sum(self.action_total(name) for name in self.versions)

    @property
    def actions_with_multiple_versions(self) -> int:
        return sum(1 for v in self.versions.values() if len(v) > 1)

    def most_used(self) -> Optional[MostUsedAction]:
        """The action with the strictly largest total, or None when nothing was counted.

        Ties go to the name that was folded in first.
        """
        best: Optional[MostUsedAction] = None
        for name in self.versions:
            total = self.action_total(name)
            if best is None or total > best.total_usages:
                best = MostUsedAction(
                    name=name,
                    total_usages=total,
                    repositories_using=len(self.repositories.get(name, ())),
                    workflows_using=self.workflow_usages.get(name, 0),
                )
        return best
