"""Stable ordering of action names and versions for report output.

Python compares ``str`` by code point, which is the same order as a byte-wise
comparison of the UTF-8 encoding, so plain ``sorted`` gives ordinal order.
Ordering is applied when reports are assembled, never while counting.
"""
from __future__ import annotations

from typing import Dict, Iterable, List, Mapping, Tuple

from .models import ActionReference, ActionUsage, VersionUsage


def sorted_names(names: Iterable[str]) -> List[str]:
    return sorted(names)


def sorted_versions(versions: Iterable[str]) -> List[str]:
    return sorted(versions)


def reference_sort_key(ref: ActionReference) -> Tuple[str, str]:
    return (ref.name, ref.version)


def ordered_versions(versions: Mapping[str, int]) -> List[VersionUsage]:
    """Version counts of one action as ``VersionUsage`` rows sorted by version."""
    return [VersionUsage(version=v, count=versions[v]) for v in sorted_versions(versions)]


def ordered_usages(counts: Mapping[ActionReference, int]) -> List[ActionUsage]:
    """Per-workflow counts as ``ActionUsage`` rows sorted by name, then version."""
    return [
        ActionUsage(name=ref.name, version=ref.version, count=counts[ref])
        for ref in sorted(counts, key=reference_sort_key)
    ]


def ordered_action_map(usage: Mapping[str, Mapping[str, int]]) -> Dict[str, Dict[str, int]]:
    """Copy of a name -> version -> count map with both levels in sorted order."""
    return {
        name: {v: usage[name][v] for v in sorted_versions(usage[name])}
        for name in sorted_names(usage)
    }
