# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Async client for the SQL Server Reporting Services catalog REST API.

Layers:

- core: configuration, certificate policies, authentication, HTTP wrapper, errors
- data: OData resource client and response decoder
- models: catalog items and resource paths
- operations: typed per-collection namespaces
"""

from .client import ReportServerClient
from .core.config import ConnectionConfig, CredentialMode, Credentials

__version__ = "0.1.0"
__all__ = ["ReportServerClient", "ConnectionConfig", "CredentialMode", "Credentials"]
