"""
Normalized timeline entities: events, their kind-specific details, and the pull request aggregate.
"""

from dataclasses import dataclass, field
from datetime import datetime
from enum import Enum
from typing import Optional, Tuple, Union


class EventKind(Enum):
    OPEN = 'OPEN'
    COMMIT = 'COMMIT'
    REVIEW = 'REVIEW'
    MERGED = 'MERGED'
    CLOSED = 'CLOSED'


class ReviewState(Enum):
    """
    Outcome of a pull request review. Values are the GitHub wire names.
    """
    PENDING = 'PENDING'
    COMMENTED = 'COMMENTED'
    APPROVED = 'APPROVED'
    CHANGES_REQUESTED = 'CHANGES_REQUESTED'
    DISMISSED = 'DISMISSED'

    @property
    def label(self) -> str:
        return _REVIEW_LABELS[self]


_REVIEW_LABELS = {
    ReviewState.PENDING: 'Pending',
    ReviewState.COMMENTED: 'Commented',
    ReviewState.APPROVED: 'Approved',
    ReviewState.CHANGES_REQUESTED: 'Changes requested',
    ReviewState.DISMISSED: 'Dismissed',
}


@dataclass(frozen=True)
class OpenDetail:
    """Synthetic event marking pull request creation. Carries no payload."""


@dataclass(frozen=True)
class CommitDetail:
    sha: str


@dataclass(frozen=True)
class ReviewDetail:
    state: ReviewState
    comment_count: int


@dataclass(frozen=True)
class MergedDetail:
    pass


@dataclass(frozen=True)
class ClosedDetail:
    pass


EventDetail = Union[OpenDetail, CommitDetail, ReviewDetail, MergedDetail, ClosedDetail]

_KIND_BY_DETAIL = {
    OpenDetail: EventKind.OPEN,
    CommitDetail: EventKind.COMMIT,
    ReviewDetail: EventKind.REVIEW,
    MergedDetail: EventKind.MERGED,
    ClosedDetail: EventKind.CLOSED,
}


@dataclass(frozen=True)
class Event:
    """
    A single dated occurrence in a pull request's timeline.

    actor is None when the source had no linked account (bots, deleted users, unlinked commit emails);
    teams is then empty. delay is elapsed hours since the preceding event and stays 0.0 until the
    timeline builder has ordered the sequence.
    """
    actor: Optional[str]
    teams: Tuple[str, ...]
    timestamp: str
    occurred_at: datetime
    details: EventDetail
    delay: float = 0.0

    @property
    def kind(self) -> EventKind:
        try:
            return _KIND_BY_DETAIL[type(self.details)]
        except KeyError:
            raise TypeError(f"unsupported event detail {type(self.details).__name__}") from None

    @property
    def review(self) -> Optional[ReviewDetail]:
        return self.details if isinstance(self.details, ReviewDetail) else None


@dataclass(frozen=True)
class PullRequest:
    """
    Fully computed pull request timeline. events are chronological and the synthetic
    Open event is first by construction.
    """
    number: int
    title: str
    diff_size: int
    author: Optional[str]
    events: Tuple[Event, ...] = field(default_factory=tuple)
    reviewers: Tuple[str, ...] = field(default_factory=tuple)
    authoring_teams: Tuple[str, ...] = field(default_factory=tuple)
    reviewing_teams: Tuple[str, ...] = field(default_factory=tuple)
