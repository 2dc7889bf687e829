"""Transports that carry a batch request to the translation endpoint."""

from __future__ import annotations

import json
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Mapping

import httpx

from .errors import RESULT_ERROR, ProviderError, TransportError

logger = logging.getLogger(__name__)

PROXY_MESSAGE_TYPE = "custom_api_proxy"
DEFAULT_TIMEOUT = 30.0

Relay = Callable[[Dict[str, Any]], Awaitable[Mapping[str, Any] | None]]


@dataclass(frozen=True)
class TransportRequest:
    """A POST of a JSON body to ``url``."""

    url: str
    body: Mapping[str, Any]
    headers: Mapping[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class TransportResponse:
    """Status plus the decoded JSON payload (``None`` when there was no body)."""

    status: int
    ok: bool
    payload: Any = None


class Transport(ABC):
    """Async request/response channel to the endpoint."""

    @abstractmethod
    async def send(self, request: TransportRequest) -> TransportResponse:
        """Deliver ``request`` and return the endpoint's response."""


def _decode_json(raw: bytes | str, *, ok: bool, status: int) -> Any:
    """Decode a response body.

    An undecodable body on a successful status is a provider fault; on an error
    status the payload is simply absent so the caller reports the status.
    """

    if not raw:
        return None
    try:
        return json.loads(raw)
    except ValueError as exc:
        if not ok:
            return None
        raise ProviderError(
            f"Endpoint returned invalid JSON (status {status}): {exc}",
            code=RESULT_ERROR,
        ) from exc


class HttpxTransport(Transport):
    """Direct HTTP transport backed by :mod:`httpx`."""

    def __init__(
        self,
        *,
        timeout: float = DEFAULT_TIMEOUT,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.timeout = httpx.Timeout(timeout)
        self._client = client

    async def send(self, request: TransportRequest) -> TransportResponse:
        try:
            if self._client is not None:
                response = await self._post(self._client, request)
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await self._post(client, request)
        except httpx.HTTPError as exc:
            raise TransportError(
                f"Request to {request.url} failed: {exc}"
            ) from exc

        ok = response.is_success
        logger.debug("POST %s -> %s", request.url, response.status_code)
        return TransportResponse(
            status=response.status_code,
            ok=ok,
            payload=_decode_json(response.content, ok=ok, status=response.status_code),
        )

    async def _post(
        self,
        client: httpx.AsyncClient,
        request: TransportRequest,
    ) -> httpx.Response:
        return await client.post(
            request.url,
            content=json.dumps(request.body, ensure_ascii=False).encode("utf-8"),
            headers=dict(request.headers),
        )


class ProxyTransport(Transport):
    """Transport that hands the request to a relay across an origin boundary.

    The relay receives ``{"type": PROXY_MESSAGE_TYPE, "payload": {"url",
    "options"}}`` and answers ``{"status", "ok", "data", "error"}`` where
    ``data`` is the already decoded JSON body (``None`` if it was not JSON).
    """

    def __init__(self, relay: Relay) -> None:
        self.relay = relay

    async def send(self, request: TransportRequest) -> TransportResponse:
        message = {
            "type": PROXY_MESSAGE_TYPE,
            "payload": {
                "url": request.url,
                "options": {
                    "method": "POST",
                    "headers": dict(request.headers),
                    "body": json.dumps(request.body, ensure_ascii=False),
                },
            },
        }
        try:
            reply = await self.relay(message)
        except TransportError:
            raise
        except Exception as exc:
            raise TransportError(f"Proxy messaging error: {exc}") from exc

        if reply is None:
            raise TransportError("Proxy messaging error: the channel closed without a reply.")
        if not isinstance(reply, Mapping):
            raise TransportError(
                f"Proxy messaging error: expected a mapping reply, got {type(reply).__name__}."
            )
        if reply.get("error"):
            raise TransportError(f"Proxy fetch error: {reply['error']}")

        try:
            status = int(reply.get("status") or 0)
        except (TypeError, ValueError) as exc:
            raise TransportError(
                f"Proxy messaging error: invalid status {reply.get('status')!r}."
            ) from exc
        ok = bool(reply.get("ok"))
        data = reply.get("data")
        if isinstance(data, (str, bytes)):
            data = _decode_json(data, ok=ok, status=status)
        return TransportResponse(status=status, ok=ok, payload=data)
