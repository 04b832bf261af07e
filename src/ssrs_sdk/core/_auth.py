# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Credential preparation and session management for one client instance.

:class:`_Authenticator` owns the transport-level credentials selected by the
:class:`~ssrs_sdk.core.config.CredentialMode` and the :class:`SessionToken` returned
by the ``Session`` login call. The token is stored on the authenticator, replaced
only by a successful :meth:`_Authenticator.authenticate_session`, and attached to
every request issued through the prepared ``httpx`` client by :class:`_SessionAwareAuth`.
"""

from __future__ import annotations

import functools
import json
import logging
from dataclasses import dataclass
from http.cookiejar import CookieJar, DefaultCookiePolicy
from typing import Generator, Optional, Tuple

import httpx

from ..models.resource_path import Collection, ResourcePath
from ._error_codes import AUTH_CREDENTIALS_MISSING, AUTH_LOGIN_REJECTED, AUTH_NO_SESSION_CREDENTIAL
from ._http import _HttpClient, _raise_for_status, _server_message
from .certificates import CertificateProbe, _PolicyTransport, probe_certificate, verifying_context
from .config import ConnectionConfig, CredentialMode
from .errors import AuthenticationError

logger = logging.getLogger(__name__)

_SESSION_PATH = ResourcePath(Collection.SESSION).render()


@dataclass(frozen=True)
class SessionToken:
    """
    Opaque session credential issued by the ``Session`` resource.

    :param cookies: ``(name, value)`` pairs returned via ``Set-Cookie``.
    :param bearer: Bearer string returned via the ``Authorization`` response header, if any.
    """

    cookies: Tuple[Tuple[str, str], ...] = ()
    bearer: Optional[str] = None

    def apply(self, request: httpx.Request) -> None:
        """Attach the token to ``request``, replacing any cookie header already present."""
        if self.cookies:
            request.headers["Cookie"] = "; ".join(f"{name}={value}" for name, value in self.cookies)
        if self.bearer:
            request.headers["Authorization"] = f"Bearer {self.bearer}"

    def __repr__(self) -> str:
        names = [name for name, _ in self.cookies]
        return f"SessionToken(cookies={names!r}, bearer={'***' if self.bearer else None})"


def _token_from_response(response: httpx.Response) -> Optional[SessionToken]:
    cookies = tuple((cookie.name, cookie.value or "") for cookie in response.cookies.jar)
    bearer = None
    scheme, _, value = response.headers.get("Authorization", "").partition(" ")
    # other schemes (Negotiate, NTLM) belong to the handshake, not the session
    if scheme.lower() == "bearer" and value.strip():
        bearer = value.strip()
    if not cookies and not bearer:
        return None
    return SessionToken(cookies=cookies, bearer=bearer)


def _refusing_cookie_jar() -> CookieJar:
    # Session state travels only through SessionToken; the client jar stores nothing.
    return CookieJar(policy=DefaultCookiePolicy(allowed_domains=[]))


class _SessionAwareAuth(httpx.Auth):
    """Attach the current session token, or fall back to the transport-level credentials."""

    def __init__(self, authenticator: "_Authenticator") -> None:
        self._authenticator = authenticator

    def auth_flow(self, request: httpx.Request) -> Generator[httpx.Request, httpx.Response, None]:
        token = self._authenticator.session_token
        if token is not None:
            token.apply(request)
            yield request
            return
        inner = self._authenticator.transport_auth
        if inner is None:
            yield request
            return
        yield from inner.auth_flow(request)


class _Authenticator:
    """
    Prepare the transport and manage the session token for one client instance.

    :param config: Connection configuration.
    :type config: ~ssrs_sdk.core.config.ConnectionConfig
    """

    def __init__(self, config: ConnectionConfig) -> None:
        self._config = config
        self._token: Optional[SessionToken] = None
        self.transport_auth: Optional[httpx.Auth] = self._select_transport_auth(config)

    @staticmethod
    def _select_transport_auth(config: ConnectionConfig) -> Optional[httpx.Auth]:
        if config.credential_mode is CredentialMode.SESSION:
            return None
        if config.transport_auth is not None:
            return config.transport_auth
        if config.credential_mode is CredentialMode.EXPLICIT and config.credentials is not None:
            return httpx.BasicAuth(config.credentials.principal, config.credentials.password)
        return None

    @property
    def session_token(self) -> Optional[SessionToken]:
        return self._token

    def prepare_transport(
        self,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
        certificate_probe: Optional[CertificateProbe] = None,
    ) -> httpx.AsyncClient:
        """
        Build the ``httpx.AsyncClient`` every request of this instance goes through.

        The client requests JSON, keeps no cookies of its own, authenticates each
        request through :class:`_SessionAwareAuth` and enforces the configured
        certificate policy via :class:`~ssrs_sdk.core.certificates._PolicyTransport`.
        The certificate probe and the verified transport share one SSL context, so a
        certificate the probe finds natively valid is also accepted by the transport.

        :param transport: Inner transport override (e.g. ``httpx.MockTransport``). When
            given it serves both verified and policy-accepted unverified origins.
        :param certificate_probe: Handshake probe override.
        :return: A ready-to-use async HTTP client.
        :rtype: httpx.AsyncClient
        """
        context = self._config.ssl_context or verifying_context()
        verified = transport if transport is not None else httpx.AsyncHTTPTransport(verify=context)

        def insecure_factory() -> httpx.AsyncBaseTransport:
            if transport is not None:
                return transport
            return httpx.AsyncHTTPTransport(verify=False)

        probe = certificate_probe or functools.partial(
            probe_certificate, timeout=self._config.http_timeout or 10.0, context=context
        )
        policy_transport = _PolicyTransport(
            self._config.certificate_policy,
            verified=verified,
            insecure_factory=insecure_factory,
            probe=probe,
        )
        logger.debug(
            "Prepared transport for %s (mode=%s)", self._config.base_url, self._config.credential_mode.value
        )
        return httpx.AsyncClient(
            auth=_SessionAwareAuth(self),
            headers={"Accept": "application/json"},
            cookies=_refusing_cookie_jar(),
            transport=policy_transport,
            # env proxy mounts would route requests around the policy transport
            trust_env=False,
        )

    async def authenticate_session(
        self,
        http: _HttpClient,
        username: Optional[str] = None,
        password: Optional[str] = None,
    ) -> SessionToken:
        """
        Log in through the ``Session`` resource and store the returned token.

        On failure the previously held token, if any, is left in place.

        :param http: HTTP wrapper bound to the prepared transport.
        :param username: Login name; defaults to the configured credentials.
        :param password: Password; defaults to the configured credentials.
        :return: The new session token.
        :rtype: SessionToken
        :raises ~ssrs_sdk.core.errors.AuthenticationError: If the server answers with a
            non-2xx status or returns no session credential.
        :raises ~ssrs_sdk.core.errors.TransportError: On network failures.
        """
        creds = self._config.credentials
        if username is None and creds is not None:
            username = creds.username
            if password is None:
                password = creds.password
        if not username:
            raise AuthenticationError(
                "A username is required to create a session.", subcode=AUTH_CREDENTIALS_MISSING
            )

        body = json.dumps({"UserName": username, "Password": password or ""}).encode("utf-8")
        response = await http._request(
            "post",
            self._config.base_url + _SESSION_PATH,
            content=body,
            headers={"Content-Type": "application/json"},
            auth=self.transport_auth,
        )
        if not response.is_success:
            message, _, excerpt = _server_message(response)
            logger.warning("Session login for %r rejected with status %s", username, response.status_code)
            raise AuthenticationError(
                f"Session login failed with status {response.status_code}" + (f": {message}" if message else ""),
                status_code=response.status_code,
                server_message=message or excerpt,
                subcode=AUTH_LOGIN_REJECTED,
            )

        token = _token_from_response(response)
        if token is None:
            raise AuthenticationError(
                "Session login succeeded but the server returned no session credential.",
                status_code=response.status_code,
                subcode=AUTH_NO_SESSION_CREDENTIAL,
            )
        self._token = token
        logger.info("Session established for %r", username)
        return token

    async def logout(self, http: _HttpClient) -> None:
        """
        End the current session, if any, and forget the token.

        The token is cleared before a non-2xx status is surfaced.
        """
        if self._token is None:
            return
        try:
            response = await http._request("delete", self._config.base_url + _SESSION_PATH)
        finally:
            self._token = None
        logger.info("Session closed")
        _raise_for_status(response, method="delete", path=_SESSION_PATH)

    def discard(self) -> None:
        self._token = None
