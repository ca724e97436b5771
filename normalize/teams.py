"""
Reverse index from a user login to the teams that user belongs to.
"""
from typing import Dict, FrozenSet, Iterable, Optional, Tuple


class TeamIndex:
    """
    Immutable login -> team names mapping built once from a team roster.
    Lookups never fail: logins outside every team resolve to no teams.
    """

    def __init__(self, teams_by_login: Optional[Dict[str, FrozenSet[str]]] = None):
        self._teams_by_login: Dict[str, FrozenSet[str]] = dict(teams_by_login or {})

    @classmethod
    def build(cls, roster: Iterable[Tuple[str, Iterable[str]]]) -> 'TeamIndex':
        """Build the index from (team_name, member_logins) pairs.

        A member listed under several teams accumulates all of them.
        """
        collected: Dict[str, set] = {}
        for team_name, members in roster:
            for login in members or []:
                collected.setdefault(login, set()).add(team_name)
        return cls({login: frozenset(names) for login, names in collected.items()})

    def lookup(self, login: Optional[str]) -> FrozenSet[str]:
        if not login:
            return frozenset()
        return self._teams_by_login.get(login, frozenset())

    def lookup_many(self, logins: Iterable[Optional[str]]) -> Tuple[str, ...]:
        """Union of the teams of every login, deduplicated and sorted."""
        names = set()
        for login in logins:
            names.update(self.lookup(login))
        return tuple(sorted(names))

    @property
    def team_names(self) -> Tuple[str, ...]:
        return self.lookup_many(self._teams_by_login)

    def __len__(self):
        return len(self._teams_by_login)

    def __contains__(self, login):
        return login in self._teams_by_login
