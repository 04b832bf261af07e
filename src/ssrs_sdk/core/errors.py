# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Structured exceptions raised by the SSRS SDK.

Every failure surfaces as a subclass of :class:`ReportServerError` so callers can
branch on the error kind instead of parsing messages:

- :class:`ConfigurationError`: bad client setup, never reaches the network.
- :class:`AuthenticationError`: the session login call was rejected.
- :class:`HttpError` and its subclasses :class:`AuthorizationError`,
  :class:`NotFoundError`, :class:`ProtocolError`, :class:`ServerError`:
  the server answered with a non-2xx status.
- :class:`TransportError` and :class:`TimeoutError`: DNS, TLS, connection or
  timeout failures, including certificate rejection by the configured policy.
- :class:`DecodeError`: the response body did not have the expected shape.
"""

from __future__ import annotations

import datetime as _dt
from typing import Any, Dict, Optional


class ReportServerError(Exception):
    """Base structured error for the SSRS SDK."""

    def __init__(
        self,
        message: str,
        *,
        code: str,
        subcode: Optional[str] = None,
        status_code: Optional[int] = None,
        details: Optional[Dict[str, Any]] = None,
        source: Optional[str] = None,
    ) -> None:
        super().__init__(message)
        self.message = message
        self.code = code
        self.subcode = subcode
        self.status_code = status_code
        self.details = details or {}
        self.source = source or "client"
        self.timestamp = _dt.datetime.now(_dt.timezone.utc).isoformat()

    def to_dict(self) -> Dict[str, Any]:
        """
        Serialize the error to a plain dictionary.

        :return: Error fields suitable for logging or JSON output.
        :rtype: dict[str, Any]
        """
        return {
            "message": self.message,
            "code": self.code,
            "subcode": self.subcode,
            "status_code": self.status_code,
            "details": self.details,
            "source": self.source,
            "timestamp": self.timestamp,
        }

    def __repr__(self) -> str:  # pragma: no cover
        return f"{self.__class__.__name__}(code={self.code!r}, subcode={self.subcode!r}, message={self.message!r})"


class ConfigurationError(ReportServerError):
    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="configuration_error", subcode=subcode, details=details, source="client")


class AuthenticationError(ReportServerError):
    """Raised when the ``Session`` login call is rejected."""

    def __init__(
        self,
        message: str,
        *,
        status_code: Optional[int] = None,
        server_message: Optional[str] = None,
        subcode: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        d = details or {}
        if server_message is not None:
            d["server_message"] = server_message
        super().__init__(
            message,
            code="authentication_error",
            subcode=subcode,
            status_code=status_code,
            details=d,
            source="server" if status_code is not None else "client",
        )
        self.server_message = server_message


class HttpError(ReportServerError):
    """
    Base class for non-2xx responses to catalog requests.

    :param message: Human readable summary.
    :param status_code: HTTP status returned by the server, or ``None`` when the request
        was rejected locally as malformed.
    :param method: HTTP method of the failed request.
    :param path: Resource path attempted, relative to the API root.
    :param server_message: Message extracted from the OData error body, when present.
    :param service_error_code: ``error.code`` from the OData error body, when present.
    :param body_excerpt: Leading part of a non-JSON response body.
    """

    code_name = "http_error"

    def __init__(
        self,
        message: str,
        status_code: Optional[int] = None,
        *,
        method: Optional[str] = None,
        path: Optional[str] = None,
        server_message: Optional[str] = None,
        service_error_code: Optional[str] = None,
        body_excerpt: Optional[str] = None,
        subcode: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        d = details or {}
        if method is not None:
            d["method"] = method
        if path is not None:
            d["path"] = path
        if server_message is not None:
            d["server_message"] = server_message
        if service_error_code is not None:
            d["service_error_code"] = service_error_code
        if body_excerpt is not None:
            d["body_excerpt"] = body_excerpt
        super().__init__(
            message,
            code=self.code_name,
            subcode=subcode,
            status_code=status_code,
            details=d,
            source="server" if status_code is not None else "client",
        )
        self.method = method
        self.path = path
        self.server_message = server_message


class AuthorizationError(HttpError):
    """401 or 403 on an authenticated call."""

    code_name = "authorization_error"


class NotFoundError(HttpError):
    """404: the addressed catalog entity or collection does not exist."""

    code_name = "not_found"


class ProtocolError(HttpError):
    """400, any unmapped non-2xx status, or a request rejected locally as malformed."""

    code_name = "protocol_error"


class ServerError(HttpError):
    """5xx returned by the report server."""

    code_name = "server_error"


class TransportError(ReportServerError):
    """
    Network-level failure: DNS, connection reset, TLS handshake or certificate rejection.

    :param reason: Reason supplied by the certificate-validation policy when the
        server certificate was rejected; ``None`` for plain connection failures.
    """

    def __init__(
        self,
        message: str,
        *,
        reason: Optional[str] = None,
        url: Optional[str] = None,
        subcode: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        d = details or {}
        if reason is not None:
            d["reason"] = reason
        if url is not None:
            d["url"] = url
        super().__init__(message, code="transport_error", subcode=subcode, details=d, source="network")
        self.reason = reason
        self.url = url


class TimeoutError(TransportError):
    """The configured request timeout elapsed."""


class DecodeError(ReportServerError):
    def __init__(self, message: str, *, subcode: Optional[str] = None, details: Optional[Dict[str, Any]] = None):
        super().__init__(message, code="decode_error", subcode=subcode, details=details, source="client")


__all__ = [
    "ReportServerError",
    "ConfigurationError",
    "AuthenticationError",
    "HttpError",
    "AuthorizationError",
    "NotFoundError",
    "ProtocolError",
    "ServerError",
    "TransportError",
    "TimeoutError",
    "DecodeError",
]
