import unittest

from normalize.teams import TeamIndex


class TestTeamIndex(unittest.TestCase):
    def setUp(self):
        self.index = TeamIndex.build([
            ('teamA', ['alice', 'carol']),
            ('teamB', ['bob', 'carol']),
            ('teamC', []),
        ])

    def test_member_resolves_to_team(self):
        self.assertEqual(self.index.lookup('alice'), frozenset({'teamA'}))

    def test_member_of_multiple_teams_accumulates(self):
        self.assertEqual(self.index.lookup('carol'), frozenset({'teamA', 'teamB'}))

    def test_unknown_login_is_empty_not_error(self):
        self.assertEqual(self.index.lookup('mallory'), frozenset())
        self.assertEqual(self.index.lookup(None), frozenset())
        self.assertEqual(self.index.lookup_many(['mallory']), ())

    def test_lookup_many_is_sorted_union(self):
        self.assertEqual(self.index.lookup_many(['bob', 'alice']), ('teamA', 'teamB'))

    def test_lookup_many_ignores_order_and_duplicates(self):
        self.assertEqual(
            self.index.lookup_many(['alice', 'bob', 'alice']),
            self.index.lookup_many(['bob', 'alice']),
        )

    def test_build_from_mapping_items(self):
        index = TeamIndex.build({'teamA': ['alice'], 'teamB': ['bob']}.items())
        self.assertEqual(len(index), 2)
        self.assertIn('bob', index)
        self.assertEqual(index.team_names, ('teamA', 'teamB'))

    def test_empty_roster(self):
        index = TeamIndex.build([])
        self.assertEqual(len(index), 0)
        self.assertEqual(index.lookup('alice'), frozenset())


if __name__ == '__main__':
    unittest.main()
