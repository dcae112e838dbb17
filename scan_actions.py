#!/usr/bin/env python3
"""
GitHub Actions usage inventory for an organization.

This script analyzes workflow configurations (not run history): it lists the
workflow files of every repository in an organization, extracts the actions
they reference, and reports how often each action and version is used, per
workflow, per repository and organization-wide.

Scan scopes:
- workflows: list repositories and their workflow files
- actions:   count action references across all workflows
- all:       both of the above (default)
Add --detailed for the repository -> workflow -> action breakdown.

Defaults:
- Organization and token are read from .env (GITHUB_ORG, GITHUB_TOKEN or GH_TOKEN).
- JSON reports are written to actions_reports/

Usage examples:
- Org-wide:
  ./scan_actions.py -o myorg -v
- Detailed breakdown to a single file:
  ./scan_actions.py -o myorg --scan actions --detailed --output actions.json
- Offline, from a directory of checkouts:
  ./scan_actions.py -o myorg --local-dir ~/src/myorg
"""

import argparse
import json
import logging
import os
import sys
from typing import Any, Dict, List, Optional

import requests
from dotenv import load_dotenv

from src.actions import SCAN_SCOPES, ActionScanner, WorkflowSource
from src.actions.scanner import Report
from src.github import GitHubClient, GitHubWorkflowSource, GraphQLError, LocalWorkflowSource

# Load environment variables from .env file
load_dotenv(override=True)


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or not raw.strip():
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


class ActionLensConfig:
    """Configuration for the action usage scanner."""

    def __init__(self, require_token: bool = True):
        self.GITHUB_TOKEN = os.getenv("GITHUB_TOKEN") or os.getenv("GH_TOKEN")
        self.ORG_NAME = os.getenv("GITHUB_ORG")
        if require_token and not self.GITHUB_TOKEN:
            raise ValueError(
                "GITHUB_TOKEN (or GH_TOKEN) environment variable is required. "
                "Set it in your environment or .env, or pass --token"
            )
        self.GITHUB_API = os.getenv("GITHUB_API", "https://api.github.com")
        self.REPORT_DIR = os.path.abspath(os.getenv("ACTIONS_REPORT_DIR", "actions_reports"))
        self.MAX_WORKERS = _env_int("ACTIONS_MAX_WORKERS", 5)


config: Optional[ActionLensConfig] = None


def setup_logging(verbosity: int = 1):
    level = logging.INFO
    if verbosity > 1:
        level = logging.DEBUG
    elif verbosity == 0:
        level = logging.WARNING
    handlers: List[logging.Handler] = [logging.StreamHandler()]
    try:
        os.makedirs('logs', exist_ok=True)
        handlers.append(logging.FileHandler('logs/actions_scan.log'))
    except OSError as e:
        print(f"Warning: file logging disabled: {e}", file=sys.stderr)
    logging.basicConfig(
        level=level,
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
        handlers=handlers,
    )


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description='Inventory GitHub Actions usage across an organization\'s workflows'
    )
    parser.add_argument('-o', '--org', type=str, help='GitHub organization (default: GITHUB_ORG)')
    parser.add_argument('-s', '--scan', type=str, default='all',
                        help='Scan scope: workflows, actions, or all (default: all)')
    parser.add_argument('-d', '--detailed', action='store_true',
                        help='Detailed analysis with a repository -> workflow -> action breakdown')
    parser.add_argument('--token', type=str, help='Personal access token (overrides env)')
    parser.add_argument('--local-dir', type=str,
                        help='Read workflows from a directory of repository checkouts instead of the API')
    parser.add_argument('--output', type=str, help='Write the JSON report to this file')
    parser.add_argument('--output-dir', type=str, help='Output directory (default: ACTIONS_REPORT_DIR or actions_reports)')
    parser.add_argument('--max-workers', type=int, help='Concurrent workflow fetches (default: 5)')
    parser.add_argument('-v', '--verbose', action='count', default=1, help='Increase verbosity')
    parser.add_argument('-q', '--quiet', action='store_true', help='Only log warnings and errors')
    return parser


def make_source(cfg: ActionLensConfig, local_dir: Optional[str] = None) -> WorkflowSource:
    if local_dir:
        return LocalWorkflowSource(local_dir)
    return GitHubWorkflowSource(
        token=cfg.GITHUB_TOKEN, api_url=cfg.GITHUB_API, pool_size=max(10, cfg.MAX_WORKERS)
    )


def report_payload(reports: List[Report]) -> Dict[str, Any]:
    """JSON document for one run; scope ``all`` carries both the workflow and the action report."""
    if len(reports) == 1:
        return reports[0].to_dict()
    return {report.kind: report.to_dict() for report in reports}


def default_output_path(report_dir: str, org: str, reports: List[Report]) -> str:
    kind = "_".join(report.kind for report in reports)
    return os.path.join(report_dir, f"{org}_{kind}.json")


def write_report(path: str, payload: Dict[str, Any]) -> None:
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)
    with open(path, 'w', encoding='utf-8') as f:
        json.dump(payload, f, indent=2)
        f.write("\n")


def log_summary(reports: List[Report]) -> None:
    for report in reports:
        data = report.to_dict()
        if report.kind == 'workflows':
            logging.info(
                f"Found {data['repositories_with_workflows']} repositories with workflows "
                f"out of {data['total_repositories']} total repositories"
            )
            continue
        summary = data.get('summary', data)
        most_used = summary.get('most_used_action')
        logging.info(
            f"Unique actions: {summary['unique_actions']}, "
            f"total usages: {summary.get('total_action_usages', summary.get('total_usages'))}, "
            f"actions with multiple versions: {summary['actions_with_multiple_versions']}"
        )
        if most_used:
            logging.info(
                f"Most used action: {most_used['name']} ({most_used['total_usages']} usages across "
                f"{most_used['repositories_using']} repos, {most_used['workflows_using']} workflows)"
            )
        skipped = data.get('skipped_workflows') or []
        if skipped:
            logging.warning(f"{len(skipped)} workflow(s) could not be analyzed")
        logging.info(f"Process time: {data['process_time_seconds']:.3f}s")


def main(argv: Optional[List[str]] = None) -> int:
    global config
    parser = build_parser()
    args = parser.parse_args(argv)

    if args.quiet:
        args.verbose = 0
    setup_logging(args.verbose)

    try:
        config = ActionLensConfig(require_token=not (args.token or args.local_dir))
    except ValueError as e:
        logging.error(f"Configuration error: {e}")
        return 1

    if args.token:
        config.GITHUB_TOKEN = args.token
    if args.org:
        config.ORG_NAME = args.org
    if not config.ORG_NAME:
        logging.error("An organization is required (pass --org or set GITHUB_ORG)")
        return 1
    if args.scan not in SCAN_SCOPES:
        logging.error(f"Invalid scan scope '{args.scan}'. Valid options: {', '.join(SCAN_SCOPES)}.")
        return 1
    if args.output_dir:
        config.REPORT_DIR = os.path.abspath(args.output_dir)
    if args.max_workers:
        config.MAX_WORKERS = args.max_workers

    source = make_source(config, args.local_dir)
    if isinstance(source, GitHubWorkflowSource):
        client: GitHubClient = source.client
        try:
            user = client.get_authenticated_user()
            logging.info(f"Authenticated as: {user.get('login')}")
        except requests.exceptions.RequestException as e:
            logging.error(f"Error getting user info: {e}")
            return 1

    logging.info(f"Target organization: {config.ORG_NAME}")
    scanner = ActionScanner(source, max_workers=config.MAX_WORKERS)
    try:
        reports = scanner.run(config.ORG_NAME, scope=args.scan, detailed=args.detailed)
    except (requests.exceptions.RequestException, GraphQLError, ValueError, OSError) as e:
        logging.error(f"Error scanning {config.ORG_NAME}: {e}")
        return 1

    output = args.output or default_output_path(config.REPORT_DIR, config.ORG_NAME, reports)
    write_report(output, report_payload(reports))
    log_summary(reports)
    logging.info(f"Report written to {output}")
    return 0


if __name__ == "__main__":
    try:
        sys.exit(main())
    except KeyboardInterrupt:
        logging.info("Scan interrupted by user")
        sys.exit(1)
    except Exception as e:
        logging.error(f"Unexpected error: {e}")
        if logging.getLogger().getEffectiveLevel() <= logging.DEBUG:
            import traceback
            traceback.print_exc()
        sys.exit(1)
