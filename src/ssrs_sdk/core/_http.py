# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Asynchronous HTTP client with timeout handling and transport error mapping.

This module provides :class:`~ssrs_sdk.core._http._HttpClient`, a thin wrapper
around :class:`httpx.AsyncClient` that applies per-method default timeouts and
translates network-level ``httpx`` exceptions into
:class:`~ssrs_sdk.core.errors.TransportError`. It never retries: retry policy
belongs to the caller.
"""

from __future__ import annotations

import logging
from typing import Any, Optional

import httpx

from ._error_codes import TRANSPORT_CONNECT, TRANSPORT_NETWORK, TRANSPORT_TIMEOUT, _http_subcode
from .errors import (
    AuthorizationError,
    NotFoundError,
    ProtocolError,
    ServerError,
    TimeoutError,
    TransportError,
)

logger = logging.getLogger(__name__)


class _HttpClient:
    """
    Issue requests through a shared :class:`httpx.AsyncClient`.

    :param client: The prepared transport handle.
    :type client: :class:`httpx.AsyncClient`
    :param timeout: Default request timeout in seconds. If None, uses per-method defaults.
    :type timeout: :class:`float` | None
    """

    def __init__(self, client: httpx.AsyncClient, timeout: Optional[float] = None) -> None:
        self._client: Optional[httpx.AsyncClient] = client
        self.default_timeout: Optional[float] = timeout

    def _timeout_for(self, method: str) -> float:
        if self.default_timeout is not None:
            return self.default_timeout
        m = (method or "").lower()
        return 120 if m in ("post", "delete") else 10

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        """
        Execute a single HTTP request.

        Applies default timeouts based on HTTP method (120s for POST/DELETE, 10s for others)
        unless ``timeout`` is passed explicitly or a client-wide timeout is configured.

        :param method: HTTP method (GET, POST, PUT, DELETE).
        :type method: :class:`str`
        :param url: Absolute target URL.
        :type url: :class:`str`
        :param kwargs: Additional arguments passed to ``httpx.AsyncClient.request()``,
            including headers, content, auth.
        :return: HTTP response object, whatever its status.
        :rtype: :class:`httpx.Response`
        :raises ~ssrs_sdk.core.errors.TimeoutError: If the timeout elapses.
        :raises ~ssrs_sdk.core.errors.TransportError: On DNS, connection or TLS failures.
        """
        if self._client is None:
            raise RuntimeError("HTTP client is closed.")
        if "timeout" not in kwargs:
            kwargs["timeout"] = self._timeout_for(method)

        logger.debug("%s %s", method.upper(), url)
        try:
            response = await self._client.request(method.upper(), url, **kwargs)
        except httpx.TimeoutException as exc:
            raise TimeoutError(
                f"Request timed out after {kwargs['timeout']} seconds",
                url=url,
                subcode=TRANSPORT_TIMEOUT,
            ) from exc
        except httpx.ConnectError as exc:
            raise TransportError(f"Connection error: {exc}", url=url, subcode=TRANSPORT_CONNECT) from exc
        except httpx.RequestError as exc:
            raise TransportError(f"Network error: {exc}", url=url, subcode=TRANSPORT_NETWORK) from exc

        level = logging.WARNING if response.status_code >= 400 else logging.DEBUG
        logger.log(level, "%s %s -> %s", method.upper(), url, response.status_code)
        return response

    async def close(self) -> None:
        """
        Close the underlying ``httpx`` client and release pooled connections.

        Safe to call multiple times.
        """
        if self._client is not None:
            await self._client.aclose()
            self._client = None


def _server_message(response: httpx.Response) -> tuple[Optional[str], Optional[str], Optional[str]]:
    """Return ``(message, service_error_code, body_excerpt)`` mined from an error response."""
    try:
        body = response.json()
    except ValueError:
        text = response.text or ""
        return None, None, (text[:200] or None)
    if isinstance(body, dict):
        err = body.get("error")
        if isinstance(err, dict):
            msg = err.get("message")
            code = err.get("code")
            return (
                msg if isinstance(msg, str) else None,
                code if isinstance(code, str) else None,
                None,
            )
        if isinstance(err, str):
            return err, None, None
        msg = body.get("message") or body.get("Message")
        if isinstance(msg, str):
            return msg, None, None
    return None, None, None


def _raise_for_status(response: httpx.Response, *, method: str, path: str) -> None:
    """
    Raise the typed error matching a non-2xx response; return quietly on 2xx.

    400 and unmapped statuses raise :class:`ProtocolError`, 401/403
    :class:`AuthorizationError`, 404 :class:`NotFoundError` and 5xx :class:`ServerError`.
    """
    status = response.status_code
    if 200 <= status < 300:
        return
    message, service_code, excerpt = _server_message(response)
    if status in (401, 403):
        cls = AuthorizationError
    elif status == 404:
        cls = NotFoundError
    elif 500 <= status < 600:
        cls = ServerError
    else:
        cls = ProtocolError
    summary = f"{method.upper()} {path} failed with status {status}"
    if message:
        summary = f"{summary}: {message}"
    raise cls(
        summary,
        status,
        method=method.upper(),
        path=path,
        server_message=message,
        service_error_code=service_code,
        body_excerpt=excerpt,
        subcode=_http_subcode(status),
    )
