# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

import json
from typing import Any, Mapping, Optional, Union

import httpx

from ..core._error_codes import VALIDATION_INVALID_BODY
from ..core._http import _HttpClient, _raise_for_status
from ..core.errors import ProtocolError
from ..models.resource_path import ResourcePath

Body = Union[Mapping[str, Any], bytes, str]


class _ODataClient:
    """Catalog resource client: composes URLs, issues CRUD calls and maps statuses to errors."""

    def __init__(self, http: _HttpClient, base_url: str) -> None:
        self._http = http
        self.api = base_url.rstrip("/")

    def _url(self, path: ResourcePath) -> str:
        return f"{self.api}{path.render()}"

    @staticmethod
    def _encode_body(body: Optional[Body]) -> Optional[bytes]:
        if body is None:
            return None
        if isinstance(body, bytes):
            return body
        if isinstance(body, str):
            return body.encode("utf-8")
        try:
            return json.dumps(body).encode("utf-8")
        except (TypeError, ValueError) as exc:
            raise ProtocolError(
                f"Request body is not JSON serializable: {exc}", subcode=VALIDATION_INVALID_BODY
            ) from exc

    async def _send(self, method: str, path: ResourcePath, body: Optional[Body] = None) -> httpx.Response:
        # Rendering validates the key, so malformed requests fail before any I/O.
        url = self._url(path)
        kwargs: dict[str, Any] = {}
        content = self._encode_body(body)
        if content is not None:
            kwargs["content"] = content
            kwargs["headers"] = {"Content-Type": "application/json"}
        response = await self._http._request(method, url, **kwargs)
        _raise_for_status(response, method=method, path=path.render())
        return response

    async def get(self, path: ResourcePath) -> bytes:
        """
        GET a collection or entity and return the raw payload.

        :raises ~ssrs_sdk.core.errors.NotFoundError: On 404.
        :raises ~ssrs_sdk.core.errors.AuthorizationError: On 401/403.
        :raises ~ssrs_sdk.core.errors.ServerError: On 5xx.
        :raises ~ssrs_sdk.core.errors.ProtocolError: On any other non-2xx status.
        :raises ~ssrs_sdk.core.errors.TransportError: On network failures; never retried.
        """
        response = await self._send("get", path)
        return response.content

    async def post(self, path: ResourcePath, body: Body) -> bytes:
        """POST ``body`` as JSON and return the raw payload unchanged."""
        response = await self._send("post", path, body)
        return response.content

    async def put(self, path: ResourcePath, body: Body) -> bytes:
        """PUT ``body`` as JSON and return the raw payload unchanged."""
        response = await self._send("put", path, body)
        return response.content

    async def delete(self, path: ResourcePath) -> bool:
        """DELETE the addressed entity; ``True`` on 2xx, typed error otherwise."""
        await self._send("delete", path)
        return True

    async def close(self) -> None:
        await self._http.close()
