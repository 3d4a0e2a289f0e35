"""Async gateway for the species and comments tables of the catalog API.

Each call is a single HTTP round trip and never raises for remote failures:
it returns a ``GatewayResult`` whose ``error`` carries the store's message.
A 404 on a by-id call means the row is gone and comes back as an empty
result rather than an error.
"""
import logging
from typing import Any, Mapping, Optional, Union

import httpx
from pydantic import BaseModel
from pydantic_core import to_jsonable_python

from catalog.client.config import ClientSettings, get_client_settings

logger = logging.getLogger("catalog.gateway")

Record = Union[Mapping[str, Any], BaseModel]


class GatewayError(BaseModel):
    message: str
    status_code: Optional[int] = None


class GatewayResult(BaseModel):
    data: Any = None
    error: Optional[GatewayError] = None

    @property
    def ok(self) -> bool:
        return self.error is None


def create_client(
    settings: Optional[ClientSettings] = None,
    access_token: Optional[str] = None,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> httpx.AsyncClient:
    """Build the HTTP client the gateways share; the token identifies the user."""
    settings = settings or get_client_settings()
    headers = {"Accept": "application/json"}
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    return httpx.AsyncClient(base_url=settings.api_base_url, headers=headers, transport=transport)


def _encode(record: Record) -> Any:
    if isinstance(record, BaseModel):
        return record.model_dump(mode="json", exclude_unset=True)
    return to_jsonable_python(dict(record))


def _error_message(response: httpx.Response) -> str:
    try:
        body = response.json()
    except ValueError:
        return response.text or response.reason_phrase or f"HTTP {response.status_code}"

    detail = None
    if isinstance(body, dict):
        detail = body.get("detail", body.get("error"))
    if isinstance(detail, str):
        return detail
    if isinstance(detail, list):
        parts = []
        for entry in detail:
            loc = ".".join(str(p) for p in entry.get("loc", ()) if p != "body")
            msg = entry.get("msg", "Invalid value")
            parts.append(f"{loc}: {msg}" if loc else msg)
        return "; ".join(parts)
    return response.reason_phrase or f"HTTP {response.status_code}"


class TableGateway:
    """Create/read/update/delete against one table exposed at ``path``."""

    path = ""

    def __init__(self, client: httpx.AsyncClient):
        self.client = client

    def _item_url(self, record_id: int) -> str:
        return f"{self.path}/{record_id}"

    async def _request(
        self,
        method: str,
        url: str,
        *,
        json: Any = None,
        params: Optional[Mapping[str, Any]] = None,
        missing_is_empty: bool = False,
    ) -> GatewayResult:
        try:
            response = await self.client.request(method, url, json=json, params=params)
        except httpx.HTTPError as exc:
            logger.warning("%s %s failed: %r", method, url, exc)
            return GatewayResult(error=GatewayError(message=str(exc) or exc.__class__.__name__))

        if response.status_code == 404 and missing_is_empty:
            return GatewayResult()
        if response.is_error:
            message = _error_message(response)
            logger.warning("%s %s -> %s: %s", method, url, response.status_code, message)
            return GatewayResult(error=GatewayError(message=message, status_code=response.status_code))
        if response.status_code == 204 or not response.content:
            return GatewayResult()
        return GatewayResult(data=response.json())

    async def create(self, record: Record) -> GatewayResult:
        return await self._request("POST", self.path, json=_encode(record))

    async def read_by_id(self, record_id: int) -> GatewayResult:
        return await self._request("GET", self._item_url(record_id), missing_is_empty=True)

    async def update_by_id(self, record_id: int, partial: Record) -> GatewayResult:
        return await self._request("PATCH", self._item_url(record_id), json=_encode(partial), missing_is_empty=True)

    async def delete_by_id(self, record_id: int) -> GatewayResult:
        return await self._request("DELETE", self._item_url(record_id), missing_is_empty=True)


class SpeciesGateway(TableGateway):
    path = "/species"

    async def list_all(self) -> GatewayResult:
        return await self._request("GET", self.path)


class CommentGateway(TableGateway):
    path = "/comments"

    async def list_by_foreign_key(self, species_id: int) -> GatewayResult:
        """Comments of one species in the order the store returns them."""
        return await self._request("GET", self.path, params={"species_id": species_id})
