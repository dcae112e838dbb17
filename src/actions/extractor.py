"""
Extraction of action references from parsed workflow documents.

A workflow document is whatever ``yaml.safe_load`` returns: nested mappings,
sequences and scalars. Every mapping entry keyed ``uses`` with a string value
is a candidate reference, wherever it sits in the tree, so step-level actions
and job-level reusable workflows are both picked up.
"""
from __future__ import annotations

import re
from collections.abc import Mapping
from typing import Any, Iterator, List, Optional

import yaml

from .exceptions import WorkflowParseError
from .models import ActionReference

USES_KEY = "uses"

# name@version, split at the first '@'; the version may itself contain '@' or '/'
_USES_PATTERN = re.compile(r'([^@]+)@(.+)')

WorkflowDocument = Any


def parse_workflow_document(text: str) -> WorkflowDocument:
    """Parse workflow YAML into an untyped document tree.

    Raises:
        WorkflowParseError: if the text is not valid YAML
    """
    try:
        data = yaml.safe_load(text)
    except yaml.YAMLError as e:
        raise WorkflowParseError(f"failed to parse YAML: {e}") from e
    return {} if data is None else data


def _children(node: Any) -> Optional[List[Any]]:
    if isinstance(node, Mapping):
        return list(node.items())
    if isinstance(node, (list, tuple)):
        return list(node)
    return None


def iter_uses(document: WorkflowDocument) -> Iterator[str]:
    """Yield every raw ``uses`` string found anywhere in ``document``.

    The walk is depth-first and never raises: scalars are leaves, and a
    container that is already on the current path (a self-referencing YAML
    alias) is not entered again.
    """
    stack: List[Any] = [(document, False)]
    active = set()
    while stack:
        node, leaving = stack.pop()
        if leaving:
            active.discard(id(node))
            continue
        children = _children(node)
        if children is None or id(node) in active:
            continue
        active.add(id(node))
        stack.append((node, True))
        if isinstance(node, Mapping):
            for key, value in reversed(children):
                if key == USES_KEY and isinstance(value, str):
                    yield value
                else:
                    stack.append((value, False))
        else:
            for item in reversed(children):
                stack.append((item, False))


def split_reference(raw: str) -> Optional[ActionReference]:
    """Split ``name@version`` at the first '@'.

    Returns None when there is no '@' or either side of it is empty.
    """
    match = _USES_PATTERN.fullmatch(raw)
    if not match:
        return None
    return ActionReference(name=match.group(1), version=match.group(2))


def extract_actions(document: WorkflowDocument) -> List[ActionReference]:
    """Return the well-formed action references of one workflow document."""
    references = []
    for raw in iter_uses(document):
        ref = split_reference(raw)
        if ref is not None:
            references.append(ref)
    return references
