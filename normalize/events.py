"""
Convert raw GitHub timeline items into normalized Event objects.

Every timeline item kind the GraphQL query requests has an entry in _EXTRACTORS.
Anything else is schema drift and fails loudly instead of being skipped.
"""
from typing import Any, Callable, Dict, Optional, Tuple

from errors import UnrecognizedEventKind, UnrecognizedReviewState
from normalize.models import (
    ClosedDetail,
    CommitDetail,
    Event,
    EventDetail,
    MergedDetail,
    ReviewDetail,
    ReviewState,
)
from normalize.teams import TeamIndex
from normalize.util import optional_login, parse_timestamp, require, require_int

# (timestamp field path, actor, details)
_Extracted = Tuple[Tuple[str, ...], Optional[str], EventDetail]


def parse_review_state(value: Any) -> ReviewState:
    try:
        return ReviewState(value)
    except ValueError:
        raise UnrecognizedReviewState(value) from None


def _commit(item: Dict[str, Any]) -> _Extracted:
    sha = require(item, 'commit', 'oid')
    actor = optional_login(item, 'commit', 'author', 'user', 'login')
    return ('commit', 'committedDate'), actor, CommitDetail(sha=sha)


def _review(item: Dict[str, Any]) -> _Extracted:
    state = parse_review_state(require(item, 'state'))
    comment_count = require_int(item, 'comments', 'totalCount')
    actor = optional_login(item, 'author', 'login')
    return ('publishedAt',), actor, ReviewDetail(state=state, comment_count=comment_count)


def _merged(item: Dict[str, Any]) -> _Extracted:
    return ('createdAt',), optional_login(item, 'actor', 'login'), MergedDetail()


def _closed(item: Dict[str, Any]) -> _Extracted:
    return ('createdAt',), optional_login(item, 'actor', 'login'), ClosedDetail()


_EXTRACTORS: Dict[str, Callable[[Dict[str, Any]], _Extracted]] = {
    'PullRequestCommit': _commit,
    'PullRequestReview': _review,
    'MergedEvent': _merged,
    'ClosedEvent': _closed,
}

SUPPORTED_KINDS = tuple(_EXTRACTORS)


def normalize_event(item: Dict[str, Any], teams: TeamIndex) -> Event:
    """Normalize one raw timeline item.

    Raises MissingField, InvalidTimestamp, UnrecognizedEventKind or UnrecognizedReviewState.
    The returned event has delay 0.0; the timeline builder fills it in.
    """
    kind = require(item, '__typename')
    if not isinstance(kind, str):
        raise UnrecognizedEventKind(str(kind))
    extractor = _EXTRACTORS.get(kind)
    if extractor is None:
        raise UnrecognizedEventKind(kind)

    ts_path, actor, details = extractor(item)
    timestamp = require(item, *ts_path)
    occurred_at = parse_timestamp(timestamp, '.'.join(ts_path))
    return Event(
        actor=actor,
        teams=teams.lookup_many([actor]) if actor else (),
        timestamp=timestamp,
        occurred_at=occurred_at,
        details=details,
    )
