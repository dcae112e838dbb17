"""Tests for the scan_actions command line entry point."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

import scan_actions

WORKFLOW = """
jobs:
  build:
    steps:
      - uses: actions/checkout@v4
      - uses: actions/setup-python@v5
      - uses: actions/checkout@v3
"""


@pytest.fixture
def checkouts(tmp_path: Path, monkeypatch) -> Path:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    monkeypatch.delenv("GH_TOKEN", raising=False)
    monkeypatch.delenv("GITHUB_ORG", raising=False)
    monkeypatch.delenv("ACTIONS_MAX_WORKERS", raising=False)
    workflows = tmp_path / "repos" / "svc" / ".github" / "workflows"
    workflows.mkdir(parents=True)
    (workflows / "ci.yml").write_text(WORKFLOW, encoding="utf-8")
    (tmp_path / "repos" / "docs").mkdir()
    return tmp_path / "repos"


def test_parser_defaults() -> None:
    args = scan_actions.build_parser().parse_args([])

    assert args.scan == "all"
    assert args.detailed is False
    assert args.verbose == 1


def test_detailed_scan_from_local_checkouts(checkouts: Path, tmp_path: Path) -> None:
    output = tmp_path / "out" / "report.json"

    code = scan_actions.main([
        "-o", "org", "--scan", "actions", "--detailed",
        "--local-dir", str(checkouts), "--output", str(output), "-q",
    ])

    assert code == 0
    data = json.loads(output.read_text(encoding="utf-8"))
    assert data["organization"] == "org"
    assert data["summary"]["total_repositories"] == 2
    assert data["summary"]["total_action_usages"] == 3
    assert data["summary"]["actions_with_multiple_versions"] == 1
    assert data["summary"]["most_used_action"]["name"] == "actions/checkout"
    workflow = data["repositories"][0]["workflows"][0]
    assert workflow["path"] == ".github/workflows/ci.yml"
    assert [a["version"] for a in workflow["actions"]] == ["v3", "v4", "v5"]


def test_scope_all_writes_both_reports_to_default_path(checkouts: Path, tmp_path: Path) -> None:
    code = scan_actions.main([
        "-o", "org", "--local-dir", str(checkouts), "--output-dir", str(tmp_path / "reports"), "-q",
    ])

    assert code == 0
    data = json.loads((tmp_path / "reports" / "org_workflows_actions.json").read_text(encoding="utf-8"))
    assert set(data) == {"workflows", "actions"}
    assert data["workflows"]["repositories_with_workflows"] == 1
    assert data["actions"]["total_usages"] == 3


def test_invalid_scope_fails(checkouts: Path) -> None:
    assert scan_actions.main(["-o", "org", "--scan", "runs", "--local-dir", str(checkouts), "-q"]) == 1


def test_missing_org_fails(checkouts: Path) -> None:
    assert scan_actions.main(["--local-dir", str(checkouts), "-q"]) == 1


def test_missing_token_fails_for_api_scans(checkouts: Path) -> None:
    assert scan_actions.main(["-o", "org", "-q"]) == 1


def test_missing_local_directory_fails(checkouts: Path, tmp_path: Path) -> None:
    assert scan_actions.main(["-o", "org", "--local-dir", str(tmp_path / "nowhere"), "-q"]) == 1


def test_report_payload_for_single_report(checkouts: Path) -> None:
    scanner = scan_actions.ActionScanner(scan_actions.LocalWorkflowSource(str(checkouts)))
    reports = scanner.run("org", "workflows")

    assert scan_actions.report_payload(reports)["total_repositories"] == 2
    assert scan_actions.default_output_path("/tmp/r", "org", reports) == "/tmp/r/org_workflows.json"


def test_bad_worker_count_is_reported_as_such(checkouts: Path, monkeypatch, caplog) -> None:
    monkeypatch.setenv("ACTIONS_MAX_WORKERS", "lots")

    assert scan_actions.main(["-o", "org", "--local-dir", str(checkouts), "-q"]) == 1
    assert "ACTIONS_MAX_WORKERS must be an integer, got 'lots'" in caplog.text
    assert "--token" not in caplog.text


def test_missing_token_message_points_at_token(checkouts: Path, caplog) -> None:
    assert scan_actions.main(["-o", "org", "-q"]) == 1
    assert "GITHUB_TOKEN (or GH_TOKEN) environment variable is required" in caplog.text
    assert "pass --token" in caplog.text
