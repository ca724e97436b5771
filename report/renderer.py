"""
Report renderer: one row per timeline event as TSV/CSV/JSON/Markdown, or per-pull-request flow summaries.
Markdown is rendered through the Jinja2 template in report/templates/timeline.md.j2.
"""

from typing import Any, Dict, Iterable, Iterator, List, Optional
from dataclasses import fields
import csv
import io
import json
import os

from jinja2 import Environment, FileSystemLoader, select_autoescape

from normalize.models import Event, PullRequest
from timeline.metrics import FlowSummary, summarize, summarize_repository

COLUMNS = [
    'timestamp',
    'actor',
    'event_type',
    'delay',
    'pr_number',
    'pr_size',
    'from_teams',
    'to_teams',
    'review_state',
    'review_comments',
]

FORMATS = ('tsv', 'csv', 'json', 'md')
SUMMARY_FORMATS = ('csv', 'json')

TEMPLATE_DIR = os.path.join(os.path.dirname(__file__), 'templates')


def _event_row(pr: PullRequest, event: Event) -> Dict[str, Any]:
    review = event.review
    return {
        'timestamp': event.timestamp,
        'actor': event.actor or '',
        'event_type': event.kind.value,
        'delay': f"{event.delay:.3f}",
        'pr_number': pr.number,
        'pr_size': pr.diff_size,
        'from_teams': ','.join(pr.authoring_teams),
        'to_teams': ','.join(pr.reviewing_teams),
        'review_state': review.state.label if review else '',
        'review_comments': review.comment_count if review else 0,
    }


def event_rows(pr: PullRequest) -> Iterator[Dict[str, Any]]:
    """Yield one output row per event, columns in COLUMNS order."""
    for event in pr.events:
        yield _event_row(pr, event)


def _all_rows(pull_requests: Iterable[PullRequest]) -> List[Dict[str, Any]]:
    rows: List[Dict[str, Any]] = []
    for pr in pull_requests:
        rows.extend(event_rows(pr))
    return rows


def render_tsv(pull_requests: Iterable[PullRequest]) -> str:
    lines = ['\t'.join(COLUMNS)]
    for row in _all_rows(pull_requests):
        lines.append('\t'.join(str(row[c]) for c in COLUMNS))
    return '\n'.join(lines) + '\n'


def _write_csv(rows: List[Dict[str, Any]], columns: List[str]) -> str:
    output = io.StringIO()
    writer = csv.DictWriter(output, fieldnames=columns, lineterminator='\n')
    writer.writeheader()
    for row in rows:
        writer.writerow(row)
    return output.getvalue()


def render_csv(pull_requests: Iterable[PullRequest]) -> str:
    return _write_csv(_all_rows(pull_requests), COLUMNS)


def render_json(pull_requests: Iterable[PullRequest]) -> str:
    """Export each pull request with its event rows as JSON."""
    serializable = []
    for pr in pull_requests:
        serializable.append({
            'number': pr.number,
            'title': pr.title,
            'author': pr.author,
            'diff_size': pr.diff_size,
            'reviewers': list(pr.reviewers),
            'authoring_teams': list(pr.authoring_teams),
            'reviewing_teams': list(pr.reviewing_teams),
            'events': list(event_rows(pr)),
        })
    return json.dumps(serializable, indent=2)


def _environment() -> Environment:
    return Environment(
        loader=FileSystemLoader(TEMPLATE_DIR),
        autoescape=select_autoescape(['html', 'xml']),
        trim_blocks=True,
        lstrip_blocks=True,
    )


def render_markdown(pull_requests: Iterable[PullRequest], generated_at: Optional[str] = None) -> str:
    prs = list(pull_requests)
    tmpl = _environment().get_template('timeline.md.j2')
    sections = [{'pr': pr, 'rows': list(event_rows(pr)), 'summary': summarize(pr)} for pr in prs]
    overview = summarize_repository([s['summary'] for s in sections])
    return tmpl.render(sections=sections, overview=overview, columns=COLUMNS, generated_at=generated_at)


def render(pull_requests: Iterable[PullRequest], fmt: str = 'tsv', generated_at: Optional[str] = None) -> str:
    """Render event rows for the given pull requests in one of FORMATS."""
    fmt_l = (fmt or 'tsv').lower()
    if fmt_l == 'tsv':
        return render_tsv(pull_requests)
    if fmt_l == 'csv':
        return render_csv(pull_requests)
    if fmt_l == 'json':
        return render_json(pull_requests)
    if fmt_l in ('md', 'markdown'):
        return render_markdown(pull_requests, generated_at=generated_at)
    raise ValueError(f"unsupported output format {fmt!r}; expected one of {', '.join(FORMATS)}")


def render_summary(pull_requests: Iterable[PullRequest], fmt: str = 'csv') -> str:
    """Render per-pull-request flow metrics (csv) or metrics plus repository aggregates (json)."""
    summaries = [summarize(pr) for pr in pull_requests]
    fmt_l = (fmt or 'csv').lower()
    if fmt_l == 'csv':
        columns = [f.name for f in fields(FlowSummary)]
        return _write_csv([s.to_dict() for s in summaries], columns)
    if fmt_l == 'json':
        return json.dumps({
            'overview': summarize_repository(summaries),
            'pull_requests': [s.to_dict() for s in summaries],
        }, indent=2)
    raise ValueError(f"unsupported summary format {fmt!r}; expected one of {', '.join(SUMMARY_FORMATS)}")
