# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Operation namespace classes for the SSRS SDK.

- CatalogOperations: typed CRUD on one catalog collection
- FolderOperations: catalog operations plus folder creation by name
"""

__all__ = []
