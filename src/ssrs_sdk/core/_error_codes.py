# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Subcode constants attached to :class:`~ssrs_sdk.core.errors.ReportServerError` instances.

Subcodes give callers a stable, string-valued discriminator below the error class,
for example to tell an untrusted certificate apart from an unreachable host.
"""

from __future__ import annotations

# HTTP status subcodes are "http_<status>", see _http_subcode

# Transport subcodes
TRANSPORT_CONNECT = "transport_connect"
TRANSPORT_NETWORK = "transport_network"
TRANSPORT_TIMEOUT = "transport_timeout"
TRANSPORT_CERTIFICATE_REJECTED = "transport_certificate_rejected"

# Configuration subcodes
CONFIG_BASE_URL_MISSING = "config_base_url_missing"
CONFIG_BASE_URL_INVALID = "config_base_url_invalid"
CONFIG_CREDENTIALS_MISSING = "config_credentials_missing"
CONFIG_CREDENTIALS_UNEXPECTED = "config_credentials_unexpected"
CONFIG_CREDENTIAL_MODE_INVALID = "config_credential_mode_invalid"
CONFIG_INSECURE_POLICY = "config_insecure_policy"
CONFIG_TIMEOUT_INVALID = "config_timeout_invalid"

# Authentication subcodes
AUTH_LOGIN_REJECTED = "auth_login_rejected"
AUTH_NO_SESSION_CREDENTIAL = "auth_no_session_credential"
AUTH_CREDENTIALS_MISSING = "auth_credentials_missing"

# Request validation subcodes (raised before the network is touched)
VALIDATION_INVALID_KEY = "validation_invalid_key"
VALIDATION_INVALID_BODY = "validation_invalid_body"

# Decode subcodes
DECODE_INVALID_ENCODING = "decode_invalid_encoding"
DECODE_INVALID_JSON = "decode_invalid_json"
DECODE_UNEXPECTED_SHAPE = "decode_unexpected_shape"
DECODE_INVALID_FIELD = "decode_invalid_field"


def _http_subcode(status: int) -> str:
    """Return the ``http_<status>`` subcode for a status code."""
    return f"http_{status}"

