"""
CLI entry point for prflow. Wires the pipeline: teams -> team index -> paged pull requests -> timelines -> report
"""

import argparse
import os
import sys
from datetime import datetime, timezone
from typing import List, Optional

from config import RunConfig, load_config
from errors import TimelineError
from ingest.cursor import PageCursor
from ingest.github import GitHubClient, roster_from_teams
from ingest.retry import configure_retry
from normalize.models import PullRequest
from normalize.teams import TeamIndex
from report.renderer import FORMATS, SUMMARY_FORMATS, render, render_summary
from timeline.builder import build_pull_request


def _status(message: str):
    # stdout is reserved for the report itself
    print(message, file=sys.stderr)


def build_team_index(client: GitHubClient, config: RunConfig) -> TeamIndex:
    """Fetch the organization's team roster and index it by member login."""
    nodes = client.fetch_teams(config.org, config.team_filter)
    index = TeamIndex.build(roster_from_teams(nodes))
    _status(f"Indexed {len(index)} members across {len(nodes)} teams")
    return index


def fetch_pull_requests(client: GitHubClient, config: RunConfig, teams: TeamIndex) -> List[PullRequest]:
    """Page through the repository's pull requests and build each timeline."""
    cursor = PageCursor(client.fetch_page, config.org, config.repo, config.total)
    pull_requests: List[PullRequest] = []
    for batch in cursor:
        _status(f"Fetching pull requests... {cursor.fetched}/{config.total}")
        for raw in batch:
            pull_requests.append(build_pull_request(raw, teams))
    return pull_requests


def run_pipeline(config: RunConfig, summary: bool = False) -> str:
    """Execute fetch -> build -> render and return the rendered report."""
    allowed = SUMMARY_FORMATS if summary else FORMATS
    if config.output not in allowed:
        raise ValueError(f"unsupported output format {config.output!r}; expected one of {', '.join(allowed)}")
    client = GitHubClient(config.token, api_url=config.api_url)
    teams = build_team_index(client, config)
    pull_requests = fetch_pull_requests(client, config, teams)
    if summary:
        return render_summary(pull_requests, fmt=config.output)
    return render(pull_requests, fmt=config.output, generated_at=datetime.now(timezone.utc).isoformat())


def write_output(rendered: str, out_file: str = ''):
    """Write the report to a file, or to stdout when no file is given."""
    if not out_file:
        sys.stdout.write(rendered)
        return
    out_dir = os.path.dirname(out_file)
    if out_dir:
        os.makedirs(out_dir, exist_ok=True)
    # newline='' is safe for CSV on Windows and harmless for other formats
    with open(out_file, 'w', encoding='utf-8', newline='') as fh:
        fh.write(rendered)
    _status(f"Wrote report to {out_file}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Pull request timeline and team-flow report")
    parser.add_argument("--org", type=str, help="Organization / repository owner (or env PRFLOW_ORG)")
    parser.add_argument("--repo", type=str, help="Repository name (or env PRFLOW_REPO)")
    parser.add_argument("--team-filter", type=str, help="Only index teams whose name matches this search string")
    parser.add_argument("--total", type=int, help="Number of most recent pull requests to fetch (default: 600)")
    parser.add_argument("--token", type=str, help="GitHub API token (or env GITHUB_TOKEN)")
    parser.add_argument("--api-url", type=str, help="GitHub GraphQL endpoint (default: https://api.github.com/graphql)")
    parser.add_argument("--config", type=str, default="", help="Path to a YAML config file (optional)")
    parser.add_argument("--output", type=str, help=f"Output format ({', '.join(FORMATS)}; summary: {', '.join(SUMMARY_FORMATS)})")
    parser.add_argument("--out-file", type=str, default="", help="Output file path. If omitted the report is written to stdout")
    parser.add_argument("--summary", action="store_true", help="Render per-pull-request flow metrics instead of event rows")
    # retry/backoff knobs: optional CLI overrides. Environment variables PRFLOW_MAX_RETRIES, PRFLOW_BACKOFF_BASE,
    # PRFLOW_BACKOFF_JITTER, PRFLOW_MAX_BACKOFF may also be used to set defaults.
    parser.add_argument("--max-retries", type=int, default=None, help="Maximum attempts per GitHub request (overrides PRFLOW_MAX_RETRIES env)")
    parser.add_argument("--backoff-base", type=float, default=None, help="Base backoff seconds (overrides PRFLOW_BACKOFF_BASE env)")
    parser.add_argument("--backoff-jitter", type=float, default=None, help="Jitter seconds added to backoff (overrides PRFLOW_BACKOFF_JITTER env)")
    parser.add_argument("--max-backoff", type=float, default=None, help="Maximum backoff cap in seconds (overrides PRFLOW_MAX_BACKOFF env)")
    return parser


def main(argv: Optional[List[str]] = None):
    parser = build_parser()
    args = parser.parse_args(argv)

    # Apply runtime retry/backoff configuration (CLI flags take precedence over environment variables)
    configure_retry(max_retries=args.max_retries, backoff_base=args.backoff_base, backoff_jitter=args.backoff_jitter, max_backoff=args.max_backoff)

    try:
        config = load_config(
            overrides={
                'org': args.org,
                'repo': args.repo,
                'token': args.token,
                'team_filter': args.team_filter,
                'total': args.total,
                'api_url': args.api_url,
                'output': args.output or ('csv' if args.summary else None),
            },
            config_path=args.config,
        )
        rendered = run_pipeline(config, summary=args.summary)
    except (TimelineError, ValueError) as exc:
        print(f"error: {exc}", file=sys.stderr)
        sys.exit(1)

    write_output(rendered, args.out_file.strip())


if __name__ == "__main__":
    main()
