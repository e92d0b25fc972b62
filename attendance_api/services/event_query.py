# attendance_api/services/event_query.py
"""
Query executor for CouchDB Mango (_find) queries.

A query runs as an ordered list of attempts:
  1. sorted   — ask CouchDB to sort (needs a matching index)
  2. unsorted — same selector, limit and bookmark, no sort
and whichever page comes back is normalized in memory, so rows always leave
this module in the requested order no matter which attempt answered.
"""

from dataclasses import dataclass, field
from typing import Any, List, Optional

from attendance_api.database import CouchClient, json_body
from attendance_api.exceptions import BackendUnavailable, QueryFailed
from attendance_api.models.event import EVENT_KIND, EventPage, EventRecord
from attendance_api.utils.logger import get_logger

logger = get_logger(__name__)

MIN_LIMIT = 1
MAX_LIMIT = 100
DEFAULT_LIMIT = 25
NO_BOOKMARK = ("", "nil")


def clamp_limit(raw: Any, default: int = DEFAULT_LIMIT) -> int:
    """Parse a page size; zero or garbage falls back to default, result is within [1, 100]."""
    try:
        value = int(str(raw).strip())
    except (TypeError, ValueError):
        value = 0
    if not value:
        value = default
    return max(MIN_LIMIT, min(MAX_LIMIT, value))


@dataclass
class FindQuery:
    selector: dict
    sort_field: str
    descending: bool = False
    limit: int = DEFAULT_LIMIT
    bookmark: Optional[str] = None
    fields: Optional[List[str]] = None

    def body(self, with_sort: bool) -> dict:
        body = {"selector": self.selector, "limit": self.limit}
        if with_sort:
            body["sort"] = [{self.sort_field: "desc" if self.descending else "asc"}]
        if self.fields:
            body["fields"] = self.fields
        if self.bookmark:
            body["bookmark"] = self.bookmark
        return body


@dataclass
class FindResult:
    docs: List[dict] = field(default_factory=list)
    bookmark: Optional[str] = None
    path: str = "sorted"


class AttemptFailed(Exception):
    def __init__(self, status: Optional[int]):
        super().__init__(f"HTTP {status}")
        self.status = status


async def _attempt(client: CouchClient, query: FindQuery, with_sort: bool) -> dict:
    try:
        response = await client.find(query.body(with_sort))
    except BackendUnavailable as e:
        raise AttemptFailed(None) from e
    data = json_body(response)
    if response.status_code != 200 or not isinstance(data.get("docs"), list):
        raise AttemptFailed(response.status_code)
    return data


async def sorted_attempt(client: CouchClient, query: FindQuery) -> dict:
    return await _attempt(client, query, with_sort=True)


async def unsorted_attempt(client: CouchClient, query: FindQuery) -> dict:
    return await _attempt(client, query, with_sort=False)


ATTEMPTS = (("sorted", sorted_attempt), ("unsorted", unsorted_attempt))


def normalize(docs: List[dict], query: FindQuery) -> List[dict]:
    return sorted(docs, key=lambda d: str(d.get(query.sort_field) or ""), reverse=query.descending)


async def run_find(client: CouchClient, query: FindQuery, attempts=ATTEMPTS) -> FindResult:
    last_status = None
    for path, attempt in attempts:
        try:
            data = await attempt(client, query)
        except AttemptFailed as e:
            last_status = e.status
            logger.warning(f"_find {path} attempt failed (HTTP {e.status}) selector={query.selector}")
            continue
        bookmark = data.get("bookmark")
        return FindResult(docs=normalize(data["docs"], query), bookmark=bookmark, path=path)
    raise QueryFailed(last_status)


def build_event_selector(type_code: Optional[str] = None, created_by: Optional[str] = None) -> dict:
    selector = {"kind": EVENT_KIND}
    if type_code:
        selector["type"] = str(type_code)
    if created_by:
        selector["createdBy"] = str(created_by)
    return selector


async def list_events(client: CouchClient, selector: dict, limit: Any = None,
                      cursor: Optional[str] = None, default_limit: int = DEFAULT_LIMIT) -> EventPage:
    """One page of events, newest first, with the cursor for the following page."""
    lim = clamp_limit(limit, default_limit)
    query = FindQuery(selector=selector, sort_field="ts", descending=True, limit=lim, bookmark=cursor or None)
    result = await run_find(client, query)
    rows = [EventRecord.from_doc(d) for d in result.docs]

    next_cursor = result.bookmark
    if next_cursor in NO_BOOKMARK or len(rows) < lim:
        next_cursor = None
    return EventPage(rows=rows, next_cursor=next_cursor)
