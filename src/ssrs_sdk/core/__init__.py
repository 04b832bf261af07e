# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Core infrastructure components for the SSRS SDK.

This module contains the foundational components including configuration,
certificate policies, authentication, the HTTP wrapper, and error handling.
"""

from .certificates import CertificateCheck, PolicyDecision, default_policy, ignore_policy
from .config import ConnectionConfig, CredentialMode, Credentials
from .errors import (
    ReportServerError,
    ConfigurationError,
    AuthenticationError,
    HttpError,
    AuthorizationError,
    NotFoundError,
    ProtocolError,
    ServerError,
    TransportError,
    TimeoutError,
    DecodeError,
)

__all__ = [
    "CertificateCheck",
    "PolicyDecision",
    "default_policy",
    "ignore_policy",
    "ConnectionConfig",
    "CredentialMode",
    "Credentials",
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
