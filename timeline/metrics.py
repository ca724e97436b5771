"""
Per-pull-request flow metrics derived from a built timeline, plus repository-level aggregates.
"""
from dataclasses import dataclass, asdict
from statistics import median
from typing import Any, Dict, Iterable, List, Optional

from normalize.models import Event, EventKind, PullRequest, ReviewState
from timeline.builder import delay_hours


@dataclass(frozen=True)
class FlowSummary:
    number: int
    author: Optional[str]
    diff_size: int
    time_to_first_review: Optional[float]
    time_to_merge: Optional[float]
    review_count: int
    approval_count: int
    changes_requested_count: int
    commits_after_first_review: int
    handoffs: int
    cross_team: bool

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


def _first(events: Iterable[Event], kind: EventKind) -> Optional[Event]:
    return next((e for e in events if e.kind is kind), None)


def _count_handoffs(events: List[Event]) -> int:
    # actorless events are skipped; an actor in no team compares as an empty team set
    handoffs = 0
    previous = None
    for event in events:
        if event.actor is None:
            continue
        if previous is not None and set(event.teams) != previous:
            handoffs += 1
        previous = set(event.teams)
    return handoffs


def summarize(pr: PullRequest) -> FlowSummary:
    """Compute flow metrics for one pull request."""
    events = list(pr.events)
    opened = events[0] if events else None
    first_review = _first(events, EventKind.REVIEW)
    merged = _first(events, EventKind.MERGED)

    reviews = [e.review for e in events if e.review is not None]
    commits_after_review = 0
    if first_review is not None:
        commits_after_review = sum(
            1 for e in events if e.kind is EventKind.COMMIT and e.occurred_at > first_review.occurred_at
        )

    return FlowSummary(
        number=pr.number,
        author=pr.author,
        diff_size=pr.diff_size,
        time_to_first_review=delay_hours(opened, first_review) if opened and first_review else None,
        time_to_merge=delay_hours(opened, merged) if opened and merged else None,
        review_count=len(reviews),
        approval_count=sum(1 for r in reviews if r.state is ReviewState.APPROVED),
        changes_requested_count=sum(1 for r in reviews if r.state is ReviewState.CHANGES_REQUESTED),
        commits_after_first_review=commits_after_review,
        handoffs=_count_handoffs(events),
        cross_team=bool(set(pr.reviewing_teams) - set(pr.authoring_teams)),
    )


def _median_or_none(values: List[float]) -> Optional[float]:
    return median(values) if values else None


def summarize_repository(summaries: List[FlowSummary]) -> Dict[str, Any]:
    """Aggregate flow summaries across pull requests."""
    first_review = [s.time_to_first_review for s in summaries if s.time_to_first_review is not None]
    merge = [s.time_to_merge for s in summaries if s.time_to_merge is not None]
    return {
        'pull_requests': len(summaries),
        'merged': len(merge),
        'cross_team': sum(1 for s in summaries if s.cross_team),
        'median_time_to_first_review': _median_or_none(first_review),
        'median_time_to_merge': _median_or_none(merge),
    }
