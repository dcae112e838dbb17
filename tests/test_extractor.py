"""Tests for src.actions.extractor."""

from __future__ import annotations

import pytest
import yaml

from src.actions.exceptions import WorkflowParseError
from src.actions.extractor import extract_actions, iter_uses, parse_workflow_document, split_reference
from src.actions.models import ActionReference

WORKFLOW = """
name: CI
on:
  push:
    branches: [main]
jobs:
  build:
    runs-on: ubuntu-latest
    steps:
      - uses: actions/checkout@v4
      - name: Setup node
        uses: actions/setup-node@v4
        with:
          node-version: 20
      - run: npm test
  release:
    uses: octo-org/shared/.github/workflows/release.yml@main
  local:
    runs-on: ubuntu-latest
    steps:
      - uses: ./.github/actions/local-thing
      - uses: docker://alpine:3.19
"""


def test_split_reference_splits_name_and_version() -> None:
    assert split_reference("actions/checkout@v4") == ActionReference(name="actions/checkout", version="v4")


def test_split_reference_requires_separator() -> None:
    assert split_reference("actions/checkout") is None


def test_split_reference_requires_non_empty_sides() -> None:
    assert split_reference("@v4") is None
    assert split_reference("actions/checkout@") is None
    assert split_reference("") is None


def test_split_reference_splits_at_first_at_sign() -> None:
    ref = split_reference("octo-org/repo/.github/workflows/ci.yml@refs/heads/feature@2")

    assert ref == ActionReference(
        name="octo-org/repo/.github/workflows/ci.yml",
        version="refs/heads/feature@2",
    )


def test_split_reference_rejects_trailing_newline() -> None:
    assert split_reference("actions/checkout@v4\n") is None


def test_iter_uses_finds_references_at_any_depth() -> None:
    document = parse_workflow_document(WORKFLOW)

    found = sorted(iter_uses(document))

    assert found == sorted([
        "actions/checkout@v4",
        "actions/setup-node@v4",
        "octo-org/shared/.github/workflows/release.yml@main",
        "./.github/actions/local-thing",
        "docker://alpine:3.19",
    ])


def test_extract_actions_drops_malformed_references() -> None:
    refs = extract_actions(parse_workflow_document(WORKFLOW))

    assert sorted(str(r) for r in refs) == [
        "actions/checkout@v4",
        "actions/setup-node@v4",
        "octo-org/shared/.github/workflows/release.yml@main",
    ]


def test_extract_actions_keeps_duplicates() -> None:
    document = {"jobs": {"a": {"steps": [{"uses": "actions/checkout@v4"}, {"uses": "actions/checkout@v4"}]}}}

    assert extract_actions(document) == [ActionReference("actions/checkout", "v4")] * 2


def test_iter_uses_ignores_non_string_values() -> None:
    document = {"uses": 42, "steps": [{"uses": ["a@b"]}, {"uses": None}]}

    assert list(iter_uses(document)) == []


def test_iter_uses_descends_into_non_string_uses_entry() -> None:
    document = {"uses": {"uses": "actions/cache@v3"}}

    assert list(iter_uses(document)) == ["actions/cache@v3"]


@pytest.mark.parametrize("document", [None, "", "just text", 7, 3.5, True, [], {}, [None, 1, "x"]])
def test_iter_uses_is_total_on_scalars_and_empty_containers(document) -> None:
    assert list(iter_uses(document)) == []


def test_iter_uses_handles_self_referencing_alias() -> None:
    document = yaml.safe_load("a: &anchor\n  - uses: actions/checkout@v4\n  - *anchor\n")

    assert list(iter_uses(document)) == ["actions/checkout@v4"]


def test_iter_uses_counts_shared_aliases_each_time() -> None:
    document = yaml.safe_load(
        "steps: &steps\n"
        "  - uses: actions/checkout@v4\n"
        "jobs:\n"
        "  one: {steps: *steps}\n"
    )

    assert list(iter_uses(document)) == ["actions/checkout@v4", "actions/checkout@v4"]


def test_iter_uses_survives_deep_nesting() -> None:
    document = {"uses": "actions/deep@v1"}
    for _ in range(5000):
        document = {"nested": [document]}

    assert list(iter_uses(document)) == ["actions/deep@v1"]


def test_iter_uses_handles_non_string_keys() -> None:
    # YAML 1.1 reads a bare `on:` key as True
    document = parse_workflow_document("on: push\njobs:\n  a:\n    steps:\n      - uses: a/b@c\n")

    assert True in document
    assert list(iter_uses(document)) == ["a/b@c"]


def test_parse_workflow_document_treats_empty_text_as_empty_mapping() -> None:
    assert parse_workflow_document("") == {}
    assert parse_workflow_document("# only a comment\n") == {}


def test_parse_workflow_document_raises_on_invalid_yaml() -> None:
    with pytest.raises(WorkflowParseError):
        parse_workflow_document("jobs: [unclosed\n")
