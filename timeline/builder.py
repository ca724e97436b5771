"""
Timeline builder: turns one raw pull request record into a PullRequest with ordered events and delays.
"""
from dataclasses import replace
from typing import Any, Dict, List

from errors import RecordError
from normalize.events import normalize_event
from normalize.models import Event, EventKind, OpenDetail, PullRequest
from normalize.teams import TeamIndex
from normalize.util import optional_login, parse_timestamp, require, require_int


def delay_hours(earlier: Event, later: Event) -> float:
    """Elapsed hours between two events, counted in whole minutes."""
    minutes = int((later.occurred_at - earlier.occurred_at).total_seconds() // 60)
    return minutes / 60.0


def _open_event(raw: Dict[str, Any], author, teams: TeamIndex) -> Event:
    created = require(raw, 'createdAt')
    return Event(
        actor=author,
        teams=teams.lookup_many([author]) if author else (),
        timestamp=created,
        occurred_at=parse_timestamp(created, 'createdAt'),
        details=OpenDetail(),
    )


def _timeline_items(raw: Dict[str, Any]) -> List[Dict[str, Any]]:
    nodes = require(raw, 'timelineItems', 'nodes')
    if not isinstance(nodes, list):
        raise RecordError("field 'timelineItems.nodes' is not a list")
    return nodes


def assign_delays(events: List[Event]) -> List[Event]:
    """Sort events chronologically (stable) and compute each event's delay from its predecessor."""
    ordered = sorted(events, key=lambda e: e.occurred_at)
    result: List[Event] = []
    for i, event in enumerate(ordered):
        delay = delay_hours(ordered[i - 1], event) if i > 0 else 0.0
        result.append(replace(event, delay=delay))
    return result


def _build(raw: Dict[str, Any], teams: TeamIndex) -> PullRequest:
    number = require_int(raw, 'number')
    label = f"pull request #{number}"
    title = require(raw, 'title')
    diff_size = require_int(raw, 'additions') + require_int(raw, 'deletions')
    author = optional_login(raw, 'author', 'login')

    events: List[Event] = [_open_event(raw, author, teams)]
    reviewers = set()
    for index, item in enumerate(_timeline_items(raw)):
        try:
            event = normalize_event(item, teams)
        except RecordError as exc:
            exc.record = f"{label}, timeline item {index}"
            raise
        if event.kind is EventKind.REVIEW and event.actor:
            reviewers.add(event.actor)
        events.append(event)

    reviewer_logins = tuple(sorted(reviewers))
    return PullRequest(
        number=number,
        title=title,
        diff_size=diff_size,
        author=author,
        events=tuple(assign_delays(events)),
        reviewers=reviewer_logins,
        authoring_teams=teams.lookup_many([author]) if author else (),
        reviewing_teams=teams.lookup_many(reviewer_logins),
    )


def build_pull_request(raw: Dict[str, Any], teams: TeamIndex) -> PullRequest:
    """Build the full timeline for one raw pull request record.

    Raises MissingField or InvalidTimestamp for malformed records and the normalizer's errors
    for unknown event kinds or review states; the error names the pull request it came from.
    """
    if not isinstance(raw, dict):
        raise RecordError('pull request record is not an object')
    label = f"pull request #{raw.get('number')}" if raw.get('number') is not None else 'pull request'
    try:
        return _build(raw, teams)
    except RecordError as exc:
        if exc.record is None:
            exc.record = label
        raise
