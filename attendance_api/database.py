# attendance_api/database.py
"""
CouchDB connection handling.
One shared httpx.AsyncClient per application (connection reuse, fixed timeout);
a CouchClient pairs it with the BackendCredential of a single caller.
Transport failures never escape this module as raw httpx exceptions.
"""

from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Iterable, Optional
from urllib.parse import quote

import httpx

from attendance_api.exceptions import (
    BackendUnavailable, Conflict, Forbidden, NotFound, Unauthenticated, ValidationError,
)
from attendance_api.models.session import BackendCredential
from attendance_api.utils.logger import get_logger

logger = get_logger(__name__)

USERS_DB = "_users"
OK_WRITE = (201, 202)


def _no_cookie_jar() -> httpx.Cookies:
    # Backend cookies belong to one application session each and must never
    # be shared through the client-wide jar.
    return httpx.Cookies(CookieJar(policy=DefaultCookiePolicy(allowed_domains=[])))


class CouchConnector:
    """Owns the shared HTTP transport to the CouchDB server."""

    def __init__(self, base_url: str, timeout: float, transport: Optional[httpx.AsyncBaseTransport] = None):
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self._transport = transport
        self._http: Optional[httpx.AsyncClient] = None

    @property
    def http(self) -> httpx.AsyncClient:
        if self._http is None:
            self._http = httpx.AsyncClient(
                base_url=self.base_url,
                timeout=self.timeout,
                transport=self._transport,
                cookies=_no_cookie_jar(),
            )
        return self._http

    async def close(self):
        if self._http is not None:
            await self._http.aclose()
            self._http = None

    async def request(self, method: str, path: str, credential: Optional[BackendCredential] = None,
                      **kwargs) -> httpx.Response:
        """Send one request; any status code is returned, transport errors are mapped."""
        headers = dict(kwargs.pop("headers", None) or {})
        if credential is not None:
            headers.update(credential.headers)
            if credential.auth:
                kwargs["auth"] = credential.auth
        try:
            return await self.http.request(method, path, headers=headers, **kwargs)
        except httpx.TimeoutException as e:
            logger.warning(f"CouchDB timeout: {method} {path} ({e.__class__.__name__})")
            raise BackendUnavailable("backend_timeout") from e
        except httpx.HTTPError as e:
            logger.warning(f"CouchDB unreachable: {method} {path}: {e}")
            raise BackendUnavailable() from e


def doc_path(db: str, doc_id: Optional[str] = None) -> str:
    path = f"/{quote(db, safe='')}"
    if doc_id is not None:
        path += f"/{quote(doc_id, safe='')}"
    return path


def json_body(response: httpx.Response) -> dict:
    """Decoded JSON object body, or {} when the body is not a JSON object."""
    try:
        data = response.json()
    except ValueError:
        return {}
    return data if isinstance(data, dict) else {}


def raise_for_backend(response: httpx.Response, action: str, ok: Iterable[int] = (200,)):
    """Map a non-success CouchDB status onto the application error taxonomy."""
    status = response.status_code
    if status in ok:
        return
    reason = json_body(response).get("reason")
    if status == 401:
        raise Unauthenticated("backend_session_expired")
    if status == 403:
        raise Forbidden()
    if status == 404:
        raise NotFound()
    if status == 409:
        logger.info(f"{action}: revision conflict ({reason})")
        raise Conflict()
    if status == 400:
        raise ValidationError(reason or "invalid_request")
    logger.error(f"{action}: CouchDB answered HTTP {status} ({reason})")
    raise BackendUnavailable(f"{action}_failed", status=status)


class CouchClient:
    """Stateless descriptor: shared connector + one credential + target database."""

    def __init__(self, connector: CouchConnector, credential: BackendCredential, db: str):
        self.connector = connector
        self.credential = credential
        self.db = db

    async def request(self, method: str, path: str, **kwargs) -> httpx.Response:
        return await self.connector.request(method, path, credential=self.credential, **kwargs)

    async def db_info(self) -> httpx.Response:
        return await self.request("GET", doc_path(self.db))

    async def security(self) -> httpx.Response:
        return await self.request("GET", f"{doc_path(self.db)}/_security")

    async def find(self, body: dict) -> httpx.Response:
        return await self.request("POST", f"{doc_path(self.db)}/_find", json=body)

    async def get_doc(self, doc_id: str, db: Optional[str] = None) -> httpx.Response:
        return await self.request("GET", doc_path(db or self.db, doc_id))

    async def put_doc(self, doc: dict, db: Optional[str] = None) -> httpx.Response:
        return await self.request("PUT", doc_path(db or self.db, doc["_id"]), json=doc)

    async def delete_doc(self, doc_id: str, rev: str, db: Optional[str] = None) -> httpx.Response:
        return await self.request("DELETE", doc_path(db or self.db, doc_id), params={"rev": rev})

    async def all_docs(self, db: str, params: dict) -> httpx.Response:
        return await self.request("GET", f"{doc_path(db)}/_all_docs", params=params)
