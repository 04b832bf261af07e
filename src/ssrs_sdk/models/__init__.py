# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Data models and type definitions for the SSRS SDK.

- :class:`~ssrs_sdk.models.catalog_item.CatalogItem`: Decoded catalog entity.
- :class:`~ssrs_sdk.models.catalog_item.Envelope`: Collection response wrapper.
- :class:`~ssrs_sdk.models.resource_path.ResourcePath`: Structured request target.
- :class:`~ssrs_sdk.models.resource_path.Collection`: Catalog collections.

Note:
    This ``__init__.py`` does not import/export models. Import directly from
    the specific module files.
"""

__all__ = []
