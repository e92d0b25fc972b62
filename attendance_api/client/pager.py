# attendance_api/client/pager.py
"""
Bidirectional paging over a forward-only bookmark.

CouchDB only hands out "resume after this page" bookmarks, so going back
means remembering the bookmarks already used. State:

    current_cursor  bookmark of the page after the one on display (None = last page)
    history         bookmarks used to reach each page since reset (LIFO)

has_prev is exactly `history non-empty`, has_next is exactly `current_cursor
is not None`, and go_next() followed by go_prev() restores both fields.
"""

from functools import partial
from typing import Awaitable, Callable, List, Optional

from attendance_api.models.event import EventPage

Fetch = Callable[[Optional[str]], Awaitable[EventPage]]


class EventPager:
    def __init__(self, fetch: Fetch):
        self._fetch = fetch
        self.current_cursor: Optional[str] = None
        self.history: List[str] = []
        self.page: Optional[EventPage] = None

    @classmethod
    def for_client(cls, client, limit: int = 25, type_code: Optional[str] = None,
                   created_by: Optional[str] = None) -> "EventPager":
        """Pager over AttendanceApiClient.list_events with fixed filters."""
        return cls(partial(_fetch_with_filters, client, limit, type_code, created_by))

    @property
    def has_prev(self) -> bool:
        return bool(self.history)

    @property
    def has_next(self) -> bool:
        return self.current_cursor is not None

    @property
    def depth(self) -> int:
        return len(self.history)

    async def reset(self) -> EventPage:
        """Back to the first page."""
        page = await self._fetch(None)
        self.history = []
        self.current_cursor = page.next_cursor
        self.page = page
        return page

    async def go_next(self) -> Optional[EventPage]:
        """Next page, or None (state untouched) when there is none."""
        if self.current_cursor is None:
            return None
        cursor = self.current_cursor
        # Fetch before touching state so a failed request leaves the pager as it was
        page = await self._fetch(cursor)
        self.history.append(cursor)
        self.current_cursor = page.next_cursor
        self.page = page
        return page

    async def go_prev(self) -> Optional[EventPage]:
        """Previous page, or None when already on the first one. Never raises for an empty history."""
        if not self.history:
            return None
        shown = self.history[-2] if len(self.history) > 1 else None
        page = await self._fetch(shown)
        self.current_cursor = self.history.pop()
        self.page = page
        return page


async def _fetch_with_filters(client, limit, type_code, created_by, cursor):
    return await client.list_events(cursor=cursor, limit=limit, type_code=type_code, created_by=created_by)
