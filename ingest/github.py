"""
Minimal GitHub GraphQL client: team rosters and pages of pull requests with their timelines.
Transport failures and GraphQL errors surface as FetchFailed; retries live in ingest.retry.
"""
from typing import List, Dict, Any, Optional, Tuple

from errors import FetchFailed, MissingField
from ingest.queries import MEMBERS_PAGE_SIZE, PULL_REQUESTS_QUERY, TEAMS_QUERY, TIMELINE_PAGE_SIZE
from ingest.retry import post_with_retries
from normalize.util import dig

DEFAULT_API_URL = "https://api.github.com/graphql"


class GitHubClient:
    """Simple GitHub client for the GraphQL endpoint."""

    def __init__(self, token: str, api_url: Optional[str] = None, timeout: float = 30.0):
        self.token = token
        self.api_url = api_url or DEFAULT_API_URL
        self.timeout = timeout
        self.headers = {
            "Authorization": f"Bearer {self.token}",
            "Accept": "application/vnd.github+json",
            "User-Agent": "prflow",
        }

    def execute(self, query: str, variables: Optional[Dict[str, Any]] = None, tag: str = "query") -> Dict[str, Any]:
        """Run a GraphQL document and return its `data` object."""
        body = {"query": query, "variables": variables or {}}
        resp = post_with_retries(self.api_url, self.headers, body, timeout=self.timeout)
        if resp.status_code != 200:
            raise FetchFailed(f"{tag}: HTTP {resp.status_code} from {self.api_url}", status=resp.status_code)
        try:
            payload = resp.json()
        except ValueError:
            raise FetchFailed(f"{tag}: response body is not JSON", status=resp.status_code) from None
        if not isinstance(payload, dict):
            raise FetchFailed(f"{tag}: unexpected response shape", status=resp.status_code)
        errors = payload.get("errors")
        if errors:
            messages = "; ".join(str(e.get("message", e)) if isinstance(e, dict) else str(e) for e in errors)
            raise FetchFailed(f"{tag}: GraphQL errors: {messages}", status=resp.status_code)
        data = payload.get("data")
        if not isinstance(data, dict):
            raise FetchFailed(f"{tag}: response has no data", status=resp.status_code)
        return data

    def fetch_teams(self, org: str, team_filter: str = "", first: int = 20) -> List[Dict[str, Any]]:
        """Return every team node ({name, members: {nodes: [{login}]}}) for the organization.

        Teams are paged `first` at a time. A team with more members than one members page holds is a FetchFailed.
        """
        teams: List[Dict[str, Any]] = []
        after = None
        while True:
            variables = {"org": org, "teamFilter": team_filter or None, "first": first, "after": after}
            data = self.execute(TEAMS_QUERY, variables, tag="teams")
            connection = dig(data, "organization", "teams")
            nodes = dig(connection, "nodes")
            if not isinstance(nodes, list):
                raise FetchFailed(f"teams: organization '{org}' returned no team list")
            for node in nodes:
                if dig(node, "members", "pageInfo", "hasNextPage") is True:
                    raise FetchFailed(f"teams: team '{dig(node, 'name')}' has more than {MEMBERS_PAGE_SIZE} members")
            teams.extend(nodes)
            after = dig(connection, "pageInfo", "endCursor")
            if dig(connection, "pageInfo", "hasNextPage") is not True or not nodes or not after:
                return teams

    def fetch_page(self, owner: str, repo: str, limit: int, after: Optional[str] = None) -> Dict[str, Any]:
        """Return one `pullRequests` connection: {nodes, pageInfo: {endCursor, hasNextPage}}."""
        variables = {"owner": owner, "repo": repo, "first": limit, "after": after}
        data = self.execute(PULL_REQUESTS_QUERY, variables, tag="pullRequests")
        connection = dig(data, "repository", "pullRequests")
        if not isinstance(connection, dict):
            raise FetchFailed(f"pullRequests: repository '{owner}/{repo}' not found or not readable")
        for node in dig(connection, "nodes") or []:
            if dig(node, "timelineItems", "pageInfo", "hasNextPage") is True:
                raise FetchFailed(
                    f"pullRequests: pull request #{dig(node, 'number')} has more than {TIMELINE_PAGE_SIZE} timeline items"
                )
        return connection


def roster_from_teams(nodes: List[Dict[str, Any]]) -> List[Tuple[str, List[str]]]:
    """Turn GraphQL team nodes into (team_name, member_logins) pairs for TeamIndex.build."""
    roster: List[Tuple[str, List[str]]] = []
    for node in nodes or []:
        name = dig(node, "name")
        if not name:
            raise MissingField("name", record="team roster")
        members = dig(node, "members", "nodes") or []
        logins = [m["login"] for m in members if isinstance(m, dict) and m.get("login")]
        roster.append((name, logins))
    return roster
