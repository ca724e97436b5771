"""
Ingest package: GitHub GraphQL transport and cursor-based pagination.
"""

from .cursor import PageCursor
from .github import GitHubClient, roster_from_teams

__all__ = ["PageCursor", "GitHubClient", "roster_from_teams"]
