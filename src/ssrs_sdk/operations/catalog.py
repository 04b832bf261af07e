# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Catalog collection operations namespaces."""

from __future__ import annotations

from typing import Any, Dict, List, Optional, Union, TYPE_CHECKING

from ..data._decode import decode_collection, decode_entity
from ..models.catalog_item import CatalogItem
from ..models.resource_path import Collection, EntityKey, ResourcePath

if TYPE_CHECKING:
    from ..client import ReportServerClient


class CatalogOperations:
    """
    Typed CRUD operations bound to one catalog collection.

    Accessed via ``client.reports``, ``client.folders``, ``client.data_sources``,
    ``client.datasets`` and ``client.catalog_items``.

    Example::

        reports = await client.reports.list(filter="contains(Name,'Sales')", top=10)
        for report in reports:
            print(report.name, report.path)

        report = await client.reports.get(reports[0].id)
        await client.reports.update(report.id, {"Description": "Monthly sales"})
    """

    def __init__(self, client: "ReportServerClient", collection: Collection) -> None:
        """
        Initialize CatalogOperations.

        :param client: Parent ReportServerClient instance.
        :type client: ReportServerClient
        :param collection: Collection the namespace operates on.
        :type collection: Collection
        """
        self._client = client
        self.collection = collection

    def _path(self, key: Optional[EntityKey] = None, **clauses: Any) -> ResourcePath:
        return ResourcePath(self.collection, key=key, **clauses)

    async def list(
        self,
        *,
        filter: Optional[str] = None,
        select: Optional[str] = None,
        top: Optional[Union[int, str]] = None,
    ) -> List[CatalogItem]:
        """
        List the collection, optionally filtered and shaped with OData clauses.

        Only the page the server returns is decoded; no continuation is followed.

        :param filter: Raw ``$filter`` expression.
        :param select: Raw ``$select`` list.
        :param top: ``$top`` row limit.
        :return: Items in server order; empty when nothing matches.
        :rtype: list[CatalogItem]
        """
        payload = await self._client.get(self._path(filter=filter, select=select, top=top))
        return list(decode_collection(payload).items)

    async def get(self, key: EntityKey) -> CatalogItem:
        """
        Fetch one entity by identifier.

        :raises ~ssrs_sdk.core.errors.NotFoundError: If no entity has that identifier.
        """
        return decode_entity(await self._client.get(self._path(key)))

    async def create(self, data: Dict[str, Any]) -> CatalogItem:
        """Create an entity from ``data`` and return the server's representation."""
        return decode_entity(await self._client.post(self._path(), data))

    async def update(self, key: EntityKey, data: Dict[str, Any]) -> Optional[CatalogItem]:
        """
        Replace an entity with ``data``.

        :return: The updated entity, or ``None`` when the server sends no body.
        """
        payload = await self._client.put(self._path(key), data)
        if not payload.strip():
            return None
        return decode_entity(payload)

    async def delete(self, key: EntityKey) -> bool:
        return await self._client.delete(self._path(key))


class FolderOperations(CatalogOperations):
    """``client.folders``: catalog operations plus folder creation by name."""

    async def create_folder(self, name: str, parent_path: str = "/") -> CatalogItem:
        """
        Create a folder.

        :param name: Folder name.
        :param parent_path: Catalog path of the parent folder.
        :return: The created folder.

        Example::

            folder = await client.folders.create_folder("Test Folder")
        """
        return await self.create({"Name": name, "Path": parent_path, "Type": "Folder"})
