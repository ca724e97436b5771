import unittest
from datetime import datetime, timezone

from errors import InvalidTimestamp, MissingField, UnrecognizedEventKind, UnrecognizedReviewState
from normalize.events import normalize_event
from normalize.models import (
    ClosedDetail,
    CommitDetail,
    EventKind,
    MergedDetail,
    ReviewDetail,
    ReviewState,
)
from normalize.teams import TeamIndex


def commit_item(login='alice', when='2024-03-01T10:00:00Z', sha='abc123'):
    user = {'login': login} if login else None
    return {
        '__typename': 'PullRequestCommit',
        'commit': {'oid': sha, 'committedDate': when, 'author': {'user': user}},
    }


def review_item(login='bob', when='2024-03-01T12:00:00Z', state='APPROVED', comments=3):
    return {
        '__typename': 'PullRequestReview',
        'publishedAt': when,
        'state': state,
        'author': {'login': login} if login else None,
        'comments': {'totalCount': comments},
    }


class TestNormalizeEvent(unittest.TestCase):
    def setUp(self):
        self.teams = TeamIndex.build([('teamA', ['alice']), ('teamB', ['bob'])])

    def test_commit(self):
        event = normalize_event(commit_item(), self.teams)
        self.assertEqual(event.kind, EventKind.COMMIT)
        self.assertEqual(event.actor, 'alice')
        self.assertEqual(event.teams, ('teamA',))
        self.assertEqual(event.timestamp, '2024-03-01T10:00:00Z')
        self.assertEqual(event.occurred_at, datetime(2024, 3, 1, 10, tzinfo=timezone.utc))
        self.assertEqual(event.details, CommitDetail(sha='abc123'))
        self.assertEqual(event.delay, 0.0)

    def test_commit_without_linked_user_has_no_actor(self):
        event = normalize_event(commit_item(login=None), self.teams)
        self.assertIsNone(event.actor)
        self.assertEqual(event.teams, ())

    def test_commit_with_null_author(self):
        item = commit_item()
        item['commit']['author'] = None
        event = normalize_event(item, self.teams)
        self.assertIsNone(event.actor)

    def test_review(self):
        event = normalize_event(review_item(), self.teams)
        self.assertEqual(event.kind, EventKind.REVIEW)
        self.assertEqual(event.actor, 'bob')
        self.assertEqual(event.teams, ('teamB',))
        self.assertEqual(event.details, ReviewDetail(state=ReviewState.APPROVED, comment_count=3))
        self.assertEqual(event.review.state.label, 'Approved')

    def test_every_review_state(self):
        for state in ('PENDING', 'COMMENTED', 'APPROVED', 'CHANGES_REQUESTED', 'DISMISSED'):
            event = normalize_event(review_item(state=state), self.teams)
            self.assertEqual(event.review.state, ReviewState(state))
        self.assertEqual(ReviewState.CHANGES_REQUESTED.label, 'Changes requested')

    def test_merged_and_closed(self):
        merged = {'__typename': 'MergedEvent', 'createdAt': '2024-03-02T09:00:00Z', 'actor': {'login': 'alice'}}
        closed = {'__typename': 'ClosedEvent', 'createdAt': '2024-03-02T09:00:00Z', 'actor': None}
        m = normalize_event(merged, self.teams)
        c = normalize_event(closed, self.teams)
        self.assertEqual((m.kind, m.actor, m.details), (EventKind.MERGED, 'alice', MergedDetail()))
        self.assertEqual((c.kind, c.actor, c.teams, c.details), (EventKind.CLOSED, None, (), ClosedDetail()))

    def test_unknown_actor_has_no_teams(self):
        event = normalize_event(review_item(login='stranger'), self.teams)
        self.assertEqual(event.actor, 'stranger')
        self.assertEqual(event.teams, ())

    def test_normalizing_twice_is_identical(self):
        item = review_item()
        self.assertEqual(normalize_event(item, self.teams), normalize_event(item, self.teams))

    def test_unrecognized_kind(self):
        with self.assertRaises(UnrecognizedEventKind) as ctx:
            normalize_event({'__typename': 'LabeledEvent', 'createdAt': '2024-03-01T00:00:00Z'}, self.teams)
        self.assertIn('LabeledEvent', str(ctx.exception))

    def test_non_string_kind_is_unrecognized(self):
        with self.assertRaises(UnrecognizedEventKind) as ctx:
            normalize_event({'__typename': ['MergedEvent'], 'createdAt': '2024-03-01T00:00:00Z'}, self.teams)
        self.assertIn('MergedEvent', str(ctx.exception))

    def test_unrecognized_review_state(self):
        with self.assertRaises(UnrecognizedReviewState):
            normalize_event(review_item(state='LGTM'), self.teams)

    def test_missing_typename(self):
        with self.assertRaises(MissingField) as ctx:
            normalize_event({'createdAt': '2024-03-01T00:00:00Z'}, self.teams)
        self.assertEqual(ctx.exception.field, '__typename')

    def test_missing_timestamp(self):
        with self.assertRaises(MissingField) as ctx:
            normalize_event(review_item(when=None), self.teams)
        self.assertEqual(ctx.exception.field, 'publishedAt')

    def test_missing_comment_count(self):
        item = review_item()
        item['comments'] = None
        with self.assertRaises(MissingField):
            normalize_event(item, self.teams)

    def test_invalid_timestamp(self):
        with self.assertRaises(InvalidTimestamp):
            normalize_event(commit_item(when='yesterday'), self.teams)

    def test_date_only_timestamp_is_rejected(self):
        item = {'__typename': 'MergedEvent', 'createdAt': '2024-01-01', 'actor': {'login': 'alice'}}
        with self.assertRaises(InvalidTimestamp) as ctx:
            normalize_event(item, self.teams)
        self.assertEqual(ctx.exception.field, 'createdAt')

    def test_partial_timestamps_are_rejected(self):
        for when in ('2024-03-01T12:00', '20240301T120000Z', '2024-03-01 12:00:00Z', '2024-03-01T12:00:00+0200'):
            with self.subTest(when=when):
                with self.assertRaises(InvalidTimestamp):
                    normalize_event(commit_item(when=when), self.teams)

    def test_fractional_seconds_are_accepted(self):
        event = normalize_event(commit_item(when='2024-03-01T12:00:00.1234567Z'), self.teams)
        self.assertEqual(event.occurred_at, datetime(2024, 3, 1, 12, 0, 0, 123456, tzinfo=timezone.utc))

    def test_offset_timestamp_is_accepted(self):
        event = normalize_event(commit_item(when='2024-03-01T12:00:00+02:00'), self.teams)
        self.assertEqual(event.occurred_at, datetime(2024, 3, 1, 10, tzinfo=timezone.utc))


if __name__ == '__main__':
    unittest.main()
