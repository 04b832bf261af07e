# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Structured request targets for the catalog API.

A :class:`ResourcePath` names a collection, optionally one entity in it, and the
OData clauses to apply. It renders itself relative to the API root, e.g.
``/Reports(11111111-1111-1111-1111-111111111111)`` or
``/Reports?$filter=contains%28Name%2C%27Sales%27%29&$top=10``.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, replace
from enum import Enum
from typing import Optional, Union
from urllib.parse import quote

from ..core._error_codes import VALIDATION_INVALID_KEY
from ..core.errors import ProtocolError


class Collection(str, Enum):
    REPORTS = "Reports"
    FOLDERS = "Folders"
    DATA_SOURCES = "DataSources"
    DATASETS = "DataSets"
    CATALOG_ITEMS = "CatalogItems"
    SESSION = "Session"


EntityKey = Union[str, uuid.UUID]


def format_key(key: EntityKey) -> str:
    """
    Render an entity key in the server's identifier syntax.

    Accepts any form :class:`uuid.UUID` understands (braces, upper case, no hyphens)
    and returns the lowercase hyphenated string.

    :raises ~ssrs_sdk.core.errors.ProtocolError: If ``key`` is not an identifier.
    """
    if isinstance(key, uuid.UUID):
        return str(key)
    try:
        return str(uuid.UUID(str(key).strip()))
    except ValueError as exc:
        raise ProtocolError(
            f"Invalid entity key {key!r}: expected a GUID identifier",
            subcode=VALIDATION_INVALID_KEY,
        ) from exc


def _encode(value: str) -> str:
    return quote(value, safe="")


@dataclass(frozen=True)
class ResourcePath:
    """
    Request target: collection, optional entity key and OData clauses.

    :param collection: Target collection.
    :type collection: Collection
    :param key: Entity identifier; addresses ``{collection}({key})``.
    :param filter: Raw ``$filter`` expression, e.g. ``"contains(Name,'Sales')"``.
    :param select: Raw ``$select`` list, e.g. ``"Name,Path"``.
    :param top: ``$top`` row limit.

    Example::

        path = ResourcePath(Collection.REPORTS, filter="contains(Name,'Sales')", top=10)
        path.render()  # "/Reports?$filter=contains%28Name%2C%27Sales%27%29&$top=10"
    """

    collection: Collection
    key: Optional[EntityKey] = None
    filter: Optional[str] = None
    select: Optional[str] = None
    top: Optional[Union[int, str]] = None

    def with_key(self, key: EntityKey) -> "ResourcePath":
        return replace(self, key=key)

    @property
    def segment(self) -> str:
        """``Collection`` or ``Collection(key)``."""
        name = Collection(self.collection).value
        if self.key is None:
            return name
        return f"{name}({format_key(self.key)})"

    def query_string(self) -> str:
        """
        Compose the OData query string without the leading ``?``.

        Each clause value is percent-encoded on its own and clauses are emitted in the
        fixed order ``$filter``, ``$select``, ``$top``; absent clauses are skipped.
        """
        clauses = []
        if self.filter is not None:
            clauses.append(f"$filter={_encode(self.filter)}")
        if self.select is not None:
            clauses.append(f"$select={_encode(self.select)}")
        if self.top is not None:
            clauses.append(f"$top={_encode(str(self.top))}")
        return "&".join(clauses)

    def render(self) -> str:
        """Path relative to the API root, including the query string when present."""
        query = self.query_string()
        path = f"/{self.segment}"
        return f"{path}?{query}" if query else path

    def __str__(self) -> str:
        return self.render()


__all__ = ["Collection", "EntityKey", "ResourcePath", "format_key"]
