# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

from __future__ import annotations

import math
import os
import ssl
from dataclasses import dataclass
from enum import Enum
from typing import Mapping, Optional, Union
from urllib.parse import urlsplit

import httpx

from ._error_codes import (
    CONFIG_BASE_URL_INVALID,
    CONFIG_BASE_URL_MISSING,
    CONFIG_CREDENTIAL_MODE_INVALID,
    CONFIG_CREDENTIALS_MISSING,
    CONFIG_CREDENTIALS_UNEXPECTED,
    CONFIG_INSECURE_POLICY,
    CONFIG_TIMEOUT_INVALID,
)
from .certificates import CertificatePolicy, default_policy, ignore_policy
from .errors import ConfigurationError

API_ROOT = "/Reports/api/v2.0"


class CredentialMode(str, Enum):
    """How requests are authenticated against the report server."""

    INTEGRATED = "integrated"
    """Ambient credentials of the calling principal (Windows integrated security)."""

    EXPLICIT = "explicit"
    """Per-request domain/username/password credentials."""

    SESSION = "session"
    """Login call to the ``Session`` resource; the returned session token is reused."""


@dataclass(frozen=True)
class Credentials:
    username: str
    password: str = ""
    domain: Optional[str] = None

    @property
    def principal(self) -> str:
        """``DOMAIN\\username`` when a domain is set, else the bare username."""
        if self.domain:
            return f"{self.domain}\\{self.username}"
        return self.username

    def __repr__(self) -> str:
        return f"Credentials(username={self.username!r}, domain={self.domain!r}, password='***')"


def _normalize_base_url(base_url: Optional[str]) -> tuple[str, str]:
    raw = (base_url or "").strip()
    if not raw:
        raise ConfigurationError("base_url is required.", subcode=CONFIG_BASE_URL_MISSING)
    try:
        parts = urlsplit(raw)
        parts.port  # raises ValueError on a malformed port
    except ValueError as exc:
        raise ConfigurationError(
            f"base_url is not a valid URL: {raw!r}", subcode=CONFIG_BASE_URL_INVALID
        ) from exc
    if parts.scheme.lower() not in ("http", "https") or not parts.hostname:
        raise ConfigurationError(
            f"base_url must include an http(s) scheme and a host: {raw!r}",
            subcode=CONFIG_BASE_URL_INVALID,
        )
    if parts.query or parts.fragment:
        raise ConfigurationError(
            f"base_url must not carry a query string or fragment: {raw!r}",
            subcode=CONFIG_BASE_URL_INVALID,
        )
    server_url = raw.rstrip("/")
    if server_url.lower().endswith(API_ROOT.lower()):
        server_url = server_url[: -len(API_ROOT)].rstrip("/")
    return server_url, server_url + API_ROOT


@dataclass(frozen=True)
class ConnectionConfig:
    """
    Immutable connection settings for one :class:`~ssrs_sdk.client.ReportServerClient`.

    Use :meth:`build` (or :meth:`from_env`) rather than the constructor; the builder
    validates the credential invariants and normalizes the URL.

    :param server_url: Report server URL without the API root, e.g. ``"https://ssrs.contoso.com"``.
    :type server_url: str
    :param base_url: ``server_url`` followed by ``/Reports/api/v2.0``.
    :type base_url: str
    :param credential_mode: Authentication mode.
    :type credential_mode: CredentialMode
    :param credentials: Username, password and optional domain; present iff the mode is
        ``EXPLICIT`` or ``SESSION``.
    :type credentials: Credentials or None
    :param certificate_policy: Predicate deciding whether to trust the server certificate.
    :param http_timeout: Request timeout in seconds. ``None`` uses per-method defaults
        (120s for POST/DELETE, 10s for others).
    :type http_timeout: float or None
    :param production: Marks a production profile; :func:`~ssrs_sdk.core.certificates.ignore_policy`
        is refused when set.
    :type production: bool
    :param transport_auth: Optional ``httpx.Auth`` providing ambient credentials in
        ``INTEGRATED`` mode (e.g. a Negotiate/NTLM implementation) or replacing the
        default Basic credentials in ``EXPLICIT`` mode.
    :param ssl_context: Context used both to validate the server certificate natively
        and by the verified transport. ``None`` uses
        :func:`~ssrs_sdk.core.certificates.verifying_context` (platform trust store).
    """

    server_url: str
    base_url: str
    credential_mode: CredentialMode = CredentialMode.INTEGRATED
    credentials: Optional[Credentials] = None
    certificate_policy: CertificatePolicy = default_policy
    http_timeout: Optional[float] = None
    production: bool = False
    transport_auth: Optional[httpx.Auth] = None
    ssl_context: Optional[ssl.SSLContext] = None

    @classmethod
    def build(
        cls,
        base_url: str,
        credential_mode: Union[CredentialMode, str] = CredentialMode.INTEGRATED,
        credentials: Optional[Credentials] = None,
        certificate_policy: Optional[CertificatePolicy] = None,
        *,
        http_timeout: Optional[float] = None,
        production: bool = False,
        transport_auth: Optional[httpx.Auth] = None,
        ssl_context: Optional[ssl.SSLContext] = None,
    ) -> "ConnectionConfig":
        """
        Validate settings and return a normalized configuration.

        :param base_url: Report server URL, with or without a trailing ``/`` and with or
            without the ``/Reports/api/v2.0`` suffix.
        :param credential_mode: A :class:`CredentialMode` or its string value.
        :param credentials: Required for ``EXPLICIT`` and ``SESSION``; forbidden for ``INTEGRATED``.
        :param certificate_policy: Defaults to :func:`~ssrs_sdk.core.certificates.default_policy`.
        :raises ~ssrs_sdk.core.errors.ConfigurationError: On any invalid combination.

        Example::

            config = ConnectionConfig.build(
                "https://ssrs.contoso.com/",
                CredentialMode.EXPLICIT,
                Credentials("svc_reports", "secret", domain="CONTOSO"),
            )
            assert config.base_url == "https://ssrs.contoso.com/Reports/api/v2.0"
        """
        server_url, api_url = _normalize_base_url(base_url)

        try:
            mode = CredentialMode(credential_mode)
        except ValueError as exc:
            raise ConfigurationError(
                f"Unknown credential mode: {credential_mode!r}", subcode=CONFIG_CREDENTIAL_MODE_INVALID
            ) from exc

        if mode is CredentialMode.INTEGRATED and credentials is not None:
            raise ConfigurationError(
                "Integrated mode uses ambient credentials; do not pass explicit credentials.",
                subcode=CONFIG_CREDENTIALS_UNEXPECTED,
            )
        if mode in (CredentialMode.EXPLICIT, CredentialMode.SESSION):
            if credentials is None:
                raise ConfigurationError(
                    f"Credential mode {mode.value!r} requires credentials.", subcode=CONFIG_CREDENTIALS_MISSING
                )
            if not (credentials.username or "").strip():
                raise ConfigurationError(
                    f"Credential mode {mode.value!r} requires a non-empty username.",
                    subcode=CONFIG_CREDENTIALS_MISSING,
                )

        policy = certificate_policy or default_policy
        if production and policy is ignore_policy:
            raise ConfigurationError(
                "The ignore certificate policy cannot be used with a production profile.",
                subcode=CONFIG_INSECURE_POLICY,
            )

        if http_timeout is not None and not (math.isfinite(http_timeout) and http_timeout > 0):
            raise ConfigurationError(
                f"http_timeout must be a positive finite number, got {http_timeout!r}", subcode=CONFIG_TIMEOUT_INVALID
            )

        return cls(
            server_url=server_url,
            base_url=api_url,
            credential_mode=mode,
            credentials=credentials,
            certificate_policy=policy,
            http_timeout=http_timeout,
            production=production,
            transport_auth=transport_auth,
            ssl_context=ssl_context,
        )

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "ConnectionConfig":
        """
        Build a configuration from ``SSRS_*`` environment variables.

        Reads ``SSRS_SERVER_URL``, ``SSRS_CREDENTIAL_MODE``, ``SSRS_DOMAIN``,
        ``SSRS_USERNAME``, ``SSRS_PASSWORD``, ``SSRS_HTTP_TIMEOUT`` and ``SSRS_PRODUCTION``.
        Without an explicit mode, ``EXPLICIT`` is used when a username is set and
        ``INTEGRATED`` otherwise.

        :param env: Mapping to read instead of :data:`os.environ`.
        :raises ~ssrs_sdk.core.errors.ConfigurationError: If ``SSRS_SERVER_URL`` is missing
            or any value is invalid.
        """
        env = os.environ if env is None else env
        username = env.get("SSRS_USERNAME") or None
        mode = env.get("SSRS_CREDENTIAL_MODE") or (
            CredentialMode.EXPLICIT if username else CredentialMode.INTEGRATED
        )
        if isinstance(mode, str):
            mode = mode.strip().lower()

        credentials = None
        if username:
            credentials = Credentials(
                username=username,
                password=env.get("SSRS_PASSWORD", ""),
                domain=env.get("SSRS_DOMAIN") or None,
            )

        timeout_raw = env.get("SSRS_HTTP_TIMEOUT")
        try:
            http_timeout = float(timeout_raw) if timeout_raw else None
        except ValueError as exc:
            raise ConfigurationError(
                f"SSRS_HTTP_TIMEOUT is not a number: {timeout_raw!r}", subcode=CONFIG_TIMEOUT_INVALID
            ) from exc

        production = (env.get("SSRS_PRODUCTION") or "").strip().lower() in ("1", "true", "yes")
        return cls.build(
            env.get("SSRS_SERVER_URL", ""),
            mode,
            credentials,
            http_timeout=http_timeout,
            production=production,
        )


__all__ = ["API_ROOT", "ConnectionConfig", "CredentialMode", "Credentials"]
