# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

from typing import Optional

import httpx

from .core._auth import SessionToken, _Authenticator
from .core._http import _HttpClient
from .core.certificates import CertificateProbe
from .core.config import ConnectionConfig
from .data._odata import Body, _ODataClient
from .models.resource_path import Collection, ResourcePath
from .operations.catalog import CatalogOperations, FolderOperations


class ReportServerClient:
    """
    Asynchronous client for the SQL Server Reporting Services catalog REST API.

    The client authenticates according to the
    :class:`~ssrs_sdk.core.config.CredentialMode` of its configuration, enforces the
    configured certificate policy, and maps every non-2xx status to a typed error
    from :mod:`ssrs_sdk.core.errors`.

    **Async context manager (recommended)**::

        config = ConnectionConfig.build("https://ssrs.contoso.com")
        async with ReportServerClient(config) as client:
            reports = await client.reports.list(filter="contains(Name,'Sales')")

    **Without context manager**: resources are created lazily on first use; call
    :meth:`aclose` when done::

        client = ReportServerClient(config)
        try:
            folder = await client.folders.create_folder("Test Folder")
        finally:
            await client.aclose()

    Namespaces:

    - ``client.reports``, ``client.folders``, ``client.data_sources``,
      ``client.datasets``, ``client.catalog_items``: typed CRUD per collection.
    - :meth:`get`, :meth:`post`, :meth:`put`, :meth:`delete`: raw access by
      :class:`~ssrs_sdk.models.resource_path.ResourcePath`.

    One instance may serve concurrent tasks. Replacing the session with
    :meth:`authenticate_session` while other calls are in flight is not sequenced;
    callers needing atomic rotation must hold the client exclusively meanwhile.

    :param config: Connection configuration.
    :type config: ~ssrs_sdk.core.config.ConnectionConfig
    :param transport: Optional inner ``httpx`` transport, e.g. ``httpx.MockTransport`` in tests.
    :param certificate_probe: Optional TLS handshake probe replacing
        :func:`~ssrs_sdk.core.certificates.probe_certificate`.
    """

    def __init__(
        self,
        config: ConnectionConfig,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        certificate_probe: Optional[CertificateProbe] = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._certificate_probe = certificate_probe
        self._auth = _Authenticator(config)
        self._odata: Optional[_ODataClient] = None

        self.reports = CatalogOperations(self, Collection.REPORTS)
        self.folders = FolderOperations(self, Collection.FOLDERS)
        self.data_sources = CatalogOperations(self, Collection.DATA_SOURCES)
        self.datasets = CatalogOperations(self, Collection.DATASETS)
        self.catalog_items = CatalogOperations(self, Collection.CATALOG_ITEMS)

    async def __aenter__(self) -> "ReportServerClient":
        self._get_odata()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """
        Close the HTTP client and discard the session token.

        Safe to call multiple times. The server-side session is not ended; call
        :meth:`logout` first for that.
        """
        if self._odata is not None:
            await self._odata.close()
            self._odata = None
        self._auth.discard()

    @property
    def config(self) -> ConnectionConfig:
        return self._config

    @property
    def session_token(self) -> Optional[SessionToken]:
        """The session token currently attached to requests, if any."""
        return self._auth.session_token

    def _get_odata(self) -> _ODataClient:
        """Get or create the internal resource client and its transport."""
        if self._odata is None:
            http_client = self._auth.prepare_transport(
                transport=self._transport,
                certificate_probe=self._certificate_probe,
            )
            self._odata = _ODataClient(
                _HttpClient(http_client, timeout=self._config.http_timeout),
                self._config.base_url,
            )
        return self._odata

    # ------------------------------------------------------------- session

    async def authenticate_session(
        self, username: Optional[str] = None, password: Optional[str] = None
    ) -> SessionToken:
        """
        Log in through the ``Session`` resource.

        The returned token is attached automatically to every later call on this
        client until another successful login, :meth:`logout` or :meth:`aclose`.
        A rejected login leaves the previous token, if any, in place.

        :param username: Login name; defaults to the configured credentials.
        :param password: Password; defaults to the configured credentials.
        :raises ~ssrs_sdk.core.errors.AuthenticationError: If the login is rejected.
        """
        od = self._get_odata()
        return await self._auth.authenticate_session(od._http, username, password)

    async def logout(self) -> None:
        """End the server-side session and forget the token."""
        od = self._get_odata()
        await self._auth.logout(od._http)

    # ------------------------------------------------------------- raw CRUD

    async def get(self, path: ResourcePath) -> bytes:
        """GET ``path`` and return the raw payload."""
        return await self._get_odata().get(path)

    async def post(self, path: ResourcePath, body: Body) -> bytes:
        """POST ``body`` to ``path`` and return the raw payload."""
        return await self._get_odata().post(path, body)

    async def put(self, path: ResourcePath, body: Body) -> bytes:
        """PUT ``body`` to ``path`` and return the raw payload."""
        return await self._get_odata().put(path, body)

    async def delete(self, path: ResourcePath) -> bool:
        """DELETE ``path``; ``True`` on success."""
        return await self._get_odata().delete(path)


__all__ = ["ReportServerClient"]
