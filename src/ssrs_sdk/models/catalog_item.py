# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Catalog item data model.

Provides a typed, read-only view of reports, folders, data sources and datasets
returned by the catalog API, with dict-like access to the raw payload.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterator, Optional, Tuple

# Type alias for semantic clarity
ItemId = str  # lowercase hyphenated GUID string


@dataclass
class CatalogItem:
    """
    A catalog entity as reported by the server.

    The server is authoritative; nothing here is sent back on update. Fields not
    modelled below remain available in :attr:`data`.

    :param id: Server-issued unique identifier.
    :param name: Item name.
    :param description: Item description.
    :param path: Full catalog path, e.g. ``"/Sales/Monthly"``.
    :param type: Type tag, e.g. ``"Report"``, ``"Folder"``, ``"DataSource"``.
    :param modified_date: Last modification time.
    :param modified_by: Principal that last modified the item.
    :param data: The decoded JSON object, including unknown fields.

    Example::

        item = await client.reports.get(report_id)
        print(item.name, item.path)
        print(item["Hidden"])  # raw field access
    """

    id: Optional[ItemId] = None
    name: Optional[str] = None
    description: Optional[str] = None
    path: Optional[str] = None
    type: Optional[str] = None
    modified_date: Optional[datetime] = None
    modified_by: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict, repr=False)

    def __getitem__(self, key: str) -> Any:
        return self.data[key]

    def __contains__(self, key: object) -> bool:
        return key in self.data

    def __iter__(self) -> Iterator[str]:
        return iter(self.data)

    def get(self, key: str, default: Any = None) -> Any:
        return self.data.get(key, default)


@dataclass
class Envelope:
    """
    Collection response wrapper: ``{"@odata.context": ..., "value": [...]}``.

    :param context: The ``@odata.context`` metadata URL, if sent.
    :param items: Decoded items, in server order.
    """

    context: Optional[str]
    items: Tuple[CatalogItem, ...] = ()

    def __iter__(self) -> Iterator[CatalogItem]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)


__all__ = ["CatalogItem", "Envelope", "ItemId"]
