import unittest
from datetime import datetime, timedelta, timezone

from normalize.teams import TeamIndex
from timeline.builder import build_pull_request
from timeline.metrics import summarize, summarize_repository

T0 = datetime(2024, 5, 1, 8, 0, tzinfo=timezone.utc)


def at(hours):
    return (T0 + timedelta(hours=hours)).isoformat()


def raw_pr(number, items, author='alice'):
    return {
        'number': number,
        'title': f'PR {number}',
        'additions': 3,
        'deletions': 1,
        'createdAt': at(0),
        'author': {'login': author},
        'timelineItems': {'nodes': items},
    }


def review(login, hours, state):
    return {
        '__typename': 'PullRequestReview',
        'publishedAt': at(hours),
        'state': state,
        'author': {'login': login},
        'comments': {'totalCount': 1},
    }


def commit(login, hours):
    return {
        '__typename': 'PullRequestCommit',
        'commit': {'oid': f'sha{hours}', 'committedDate': at(hours), 'author': {'user': {'login': login}}},
    }


def merged(hours):
    return {'__typename': 'MergedEvent', 'createdAt': at(hours), 'actor': {'login': 'alice'}}


class TestFlowSummary(unittest.TestCase):
    def setUp(self):
        self.teams = TeamIndex.build([('web', ['alice']), ('platform', ['bob'])])

    def test_reviewed_and_merged(self):
        items = [
            commit('alice', 1),
            review('bob', 4, 'CHANGES_REQUESTED'),
            commit('alice', 6),
            review('bob', 8, 'APPROVED'),
            merged(9),
        ]
        s = summarize(build_pull_request(raw_pr(1, items), self.teams))
        self.assertEqual(s.time_to_first_review, 4.0)
        self.assertEqual(s.time_to_merge, 9.0)
        self.assertEqual(s.review_count, 2)
        self.assertEqual(s.approval_count, 1)
        self.assertEqual(s.changes_requested_count, 1)
        self.assertEqual(s.commits_after_first_review, 1)
        # web -> platform -> web -> platform -> web
        self.assertEqual(s.handoffs, 4)
        self.assertTrue(s.cross_team)

    def test_unreviewed_open_pull_request(self):
        s = summarize(build_pull_request(raw_pr(2, [commit('alice', 1)]), self.teams))
        self.assertIsNone(s.time_to_first_review)
        self.assertIsNone(s.time_to_merge)
        self.assertEqual(s.review_count, 0)
        self.assertEqual(s.handoffs, 0)
        self.assertFalse(s.cross_team)

    def test_handoffs_count_actor_outside_every_team(self):
        items = [review('outsider', 1, 'COMMENTED'), merged(2)]
        s = summarize(build_pull_request(raw_pr(3, items), self.teams))
        # web -> (no team) -> web
        self.assertEqual(s.handoffs, 2)

    def test_handoffs_skip_events_without_actor(self):
        items = [review('bob', 1, 'APPROVED'), {'__typename': 'ClosedEvent', 'createdAt': at(2), 'actor': None}, merged(3)]
        s = summarize(build_pull_request(raw_pr(4, items), self.teams))
        # web -> platform -> web; the actorless close is ignored
        self.assertEqual(s.handoffs, 2)

    def test_repository_aggregates(self):
        prs = [
            build_pull_request(raw_pr(1, [review('bob', 2, 'APPROVED'), merged(3)]), self.teams),
            build_pull_request(raw_pr(2, [review('bob', 4, 'APPROVED'), merged(10)]), self.teams),
            build_pull_request(raw_pr(3, []), self.teams),
        ]
        overview = summarize_repository([summarize(pr) for pr in prs])
        self.assertEqual(overview['pull_requests'], 3)
        self.assertEqual(overview['merged'], 2)
        self.assertEqual(overview['cross_team'], 2)
        self.assertEqual(overview['median_time_to_first_review'], 3.0)
        self.assertEqual(overview['median_time_to_merge'], 6.5)

    def test_empty_repository(self):
        overview = summarize_repository([])
        self.assertEqual(overview['pull_requests'], 0)
        self.assertIsNone(overview['median_time_to_merge'])


if __name__ == '__main__':
    unittest.main()
