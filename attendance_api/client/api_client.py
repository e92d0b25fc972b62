# attendance_api/client/api_client.py
"""
Small async client for the attendance HTTP API.
Keeps the `sid` cookie between calls, so one instance is one signed-in user.
"""

from typing import Optional

import httpx

from attendance_api.models.event import EventPage, EventRecord


class ApiError(Exception):
    def __init__(self, status_code: int, message: str):
        super().__init__(f"HTTP {status_code}: {message}")
        self.status_code = status_code
        self.message = message


class AttendanceApiClient:
    def __init__(self, base_url: str, transport: Optional[httpx.AsyncBaseTransport] = None,
                 timeout: float = 15.0):
        self._http = httpx.AsyncClient(base_url=base_url, transport=transport, timeout=timeout)

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc):
        await self.close()

    async def close(self):
        await self._http.aclose()

    async def _call(self, method: str, path: str, **kwargs) -> dict:
        response = await self._http.request(method, path, **kwargs)
        try:
            data = response.json()
        except ValueError:
            data = {}
        if response.status_code >= 400 or not data.get("ok"):
            raise ApiError(response.status_code, data.get("message") or response.reason_phrase)
        return data

    async def login(self, username: str, password: str) -> dict:
        data = await self._call("POST", "/login", json={"username": username, "password": password})
        return data["user"]

    async def logout(self):
        await self._call("POST", "/logout")

    async def me(self) -> dict:
        return (await self._call("GET", "/me"))["user"]

    async def record_event(self, type_code: str, qr_data: str) -> str:
        return (await self._call("POST", "/api/events", json={"type": type_code, "qrData": qr_data}))["id"]

    async def list_events(self, cursor: Optional[str] = None, limit: int = 25,
                          type_code: Optional[str] = None, created_by: Optional[str] = None) -> EventPage:
        params = {"limit": str(limit)}
        if type_code:
            params["type"] = type_code
        if created_by:
            params["createdBy"] = created_by
        if cursor:
            params["bookmark"] = cursor
        data = await self._call("GET", "/api/events", params=params)
        return EventPage(
            rows=[EventRecord.from_doc(r) for r in data.get("rows") or []],
            next_cursor=data.get("bookmark") or None,
        )
