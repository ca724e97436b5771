"""
Cursor-based pagination over a paged pull request source.
"""
from typing import Any, Callable, Dict, Iterator, List, Optional

from errors import FetchFailed, TimelineError

MAX_PAGE_SIZE = 100

# fetch(owner, repo, limit, after) -> {nodes: [...], pageInfo: {endCursor, hasNextPage}}
FetchPage = Callable[[str, str, int, Optional[str]], Dict[str, Any]]


class PageCursor:
    """
    Lazily yields batches of raw pull request records, at most `total` records overall.

    Each request asks for min(100, remaining) records and resumes from the previous
    page's end cursor. Iteration stops when the source reports no further page or the
    target is reached. Iterating the cursor again restarts from the first page.

    Any failure of the fetch capability, or a page missing nodes/pageInfo, raises
    FetchFailed; batches already yielded stay with the caller.
    """

    def __init__(self, fetch: FetchPage, owner: str, repo: str, total: int, page_size: int = MAX_PAGE_SIZE):
        if total < 0:
            raise ValueError("total must be >= 0")
        if not 1 <= page_size <= MAX_PAGE_SIZE:
            raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")
        self._fetch = fetch
        self.owner = owner
        self.repo = repo
        self.total = total
        self.page_size = page_size
        self.fetched = 0
        self.requests = 0
        self.end_cursor: Optional[str] = None

    def _request(self, limit: int, after: Optional[str]) -> Dict[str, Any]:
        self.requests += 1
        try:
            page = self._fetch(self.owner, self.repo, limit, after)
        except TimelineError:
            raise
        except Exception as exc:
            raise FetchFailed(f"page fetch for {self.owner}/{self.repo} failed: {exc}") from exc
        if not isinstance(page, dict):
            raise FetchFailed(f"page fetch for {self.owner}/{self.repo} returned {type(page).__name__}")
        return page

    @staticmethod
    def _unpack(page: Dict[str, Any]):
        nodes = page.get('nodes')
        page_info = page.get('pageInfo')
        if not isinstance(nodes, list):
            raise FetchFailed("page is missing 'nodes'")
        if not isinstance(page_info, dict) or not isinstance(page_info.get('hasNextPage'), bool):
            raise FetchFailed("page is missing 'pageInfo.hasNextPage'")
        return nodes, page_info['hasNextPage'], page_info.get('endCursor')

    def __iter__(self) -> Iterator[List[Dict[str, Any]]]:
        self.fetched = 0
        self.requests = 0
        self.end_cursor = None
        remaining = self.total
        after: Optional[str] = None

        while remaining > 0:
            limit = min(self.page_size, remaining)
            nodes, has_next, end_cursor = self._unpack(self._request(limit, after))

            batch = nodes[:remaining]
            remaining -= len(batch)
            self.fetched += len(batch)
            self.end_cursor = end_cursor
            yield batch

            if not has_next or remaining <= 0:
                return
            # an empty page that claims more would never advance the cursor
            if not batch:
                raise FetchFailed("source returned an empty page but reported more pages")
            if not end_cursor:
                raise FetchFailed("page is missing 'pageInfo.endCursor' while hasNextPage is true")
            after = end_cursor

    def records(self) -> Iterator[Dict[str, Any]]:
        """Flatten the batches into individual records."""
        for batch in self:
            yield from batch
