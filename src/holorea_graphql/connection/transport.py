"""
Conductor transport interface and HTTP implementation.

The transport delivers one serialized zome call to a conductor and hands
back the serialized result. It owns timeouts and maps connectivity
problems onto the bridge error taxonomy; it never retries.

Example:
    transport = HttpConductorTransport(timeout=10.0)
    raw = await transport.call(
        "http://127.0.0.1:4000", module_address, "agent", "get_my_agent", b"null"
    )
"""

from __future__ import annotations

import json
import logging
import time
from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

import httpx

from holorea_graphql.errors import NotFound, RemoteError, TransportError
from holorea_graphql.logging import get_logger, log_with_context

if TYPE_CHECKING:
    from holorea_graphql.identifiers import ModuleAddress

logger = get_logger("Transport")

RETRYABLE_STATUS = frozenset({429, 502, 503, 504})


@runtime_checkable
class ConductorTransport(Protocol):
    """Anything that can deliver a serialized zome call to a conductor."""

    @property
    def schemes(self) -> frozenset[str]:
        """URL schemes of the endpoints this transport can reach."""
        ...

    async def call(
        self,
        endpoint: str,
        module_address: ModuleAddress,
        capability: str,
        function_name: str,
        payload: bytes,
    ) -> bytes:
        """Deliver a call and return the serialized result.

        Raises:
            TransportError: the call did not complete
            RemoteError: the zome function reported a failure
        """
        ...


class HttpConductorTransport:
    """
    Delivers zome calls as JSON over HTTP.

    Each call is a POST of the serialized params to
    `{endpoint}/zome/{module}/{capability}/{function}`; a 2xx body is the
    serialized result. Error responses carry `{"type": ..., "message": ...}`.

    Args:
        timeout: Request timeout in seconds
        headers: Default headers sent with every call
        client: Shared httpx client; a short-lived one is opened per call
            when omitted
    """

    def __init__(
        self,
        *,
        timeout: float = 30.0,
        headers: dict[str, str] | None = None,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        self.timeout = timeout
        self.headers = {"Content-Type": "application/json", **(headers or {})}
        self._client = client

    @property
    def schemes(self) -> frozenset[str]:
        return frozenset({"http", "https"})

    def build_url(
        self, endpoint: str, module_address: ModuleAddress, capability: str, function_name: str
    ) -> str:
        return f"{endpoint.rstrip('/')}/zome/{module_address}/{capability}/{function_name}"

    async def call(
        self,
        endpoint: str,
        module_address: ModuleAddress,
        capability: str,
        function_name: str,
        payload: bytes,
    ) -> bytes:
        url = self.build_url(endpoint, module_address, capability, function_name)
        coordinates: dict[str, Any] = {
            "module": str(module_address),
            "capability": capability,
            "function": function_name,
        }

        start_time = time.monotonic()
        try:
            if self._client is not None:
                response = await self._client.post(
                    url, content=payload, headers=self.headers, timeout=self.timeout
                )
            else:
                async with httpx.AsyncClient(timeout=self.timeout) as client:
                    response = await client.post(url, content=payload, headers=self.headers)
        except httpx.TimeoutException as e:
            raise TransportError(
                f"Call timed out after {self.timeout}s", details={"url": url}, **coordinates
            ) from e
        except httpx.RequestError as e:
            raise TransportError(
                f"Conductor unreachable: {e}", details={"url": url}, **coordinates
            ) from e

        latency_ms = (time.monotonic() - start_time) * 1000
        log_with_context(
            logger,
            logging.DEBUG,
            f"POST {capability}/{function_name} -> {response.status_code} ({latency_ms:.1f}ms)",
            endpoint=endpoint,
        )

        return self._process_response(
            status_code=response.status_code,
            headers=dict(response.headers),
            body=response.content,
            coordinates=coordinates,
        )

    def _process_response(
        self,
        *,
        status_code: int,
        headers: dict[str, str],
        body: bytes,
        coordinates: dict[str, Any],
    ) -> bytes:
        """Return the body of a successful response, raise for errors."""
        if status_code < 400:
            return body

        try:
            data = json.loads(body) if body else {}
        except json.JSONDecodeError:
            data = {"raw": body.decode(errors="replace")}
        if not isinstance(data, dict):
            data = {"raw": data}

        message = data.get("message") or f"Conductor error: {status_code}"

        if status_code in RETRYABLE_STATUS:
            header = headers.get("retry-after") or headers.get("Retry-After") or ""
            # Only delta-seconds is honoured; HTTP-date values are ignored
            retry_after = float(header) if header.isdigit() else None
            raise TransportError(
                message,
                status_code=status_code,
                retry_after=retry_after,
                details=data,
                **coordinates,
            )
        if status_code == 404 or data.get("type") == "not_found":
            raise NotFound(
                message,
                status_code=status_code,
                remote_type=data.get("type", "not_found"),
                details=data,
                **coordinates,
            )
        raise RemoteError(
            message,
            status_code=status_code,
            remote_type=data.get("type"),
            details=data,
            **coordinates,
        )


__all__ = ["ConductorTransport", "HttpConductorTransport", "RETRYABLE_STATUS"]
