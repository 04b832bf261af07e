# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Data access layer for the SSRS SDK.

Contains the low-level OData resource client and the response decoder. These
modules are internal; use :class:`~ssrs_sdk.client.ReportServerClient`.
"""

__all__ = []
