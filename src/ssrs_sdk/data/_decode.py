# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Decode catalog API payloads into :class:`CatalogItem` and :class:`Envelope` objects."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Dict, Optional

from ..core._error_codes import (
    DECODE_INVALID_ENCODING,
    DECODE_INVALID_FIELD,
    DECODE_INVALID_JSON,
    DECODE_UNEXPECTED_SHAPE,
)
from ..core.errors import DecodeError
from ..models.catalog_item import CatalogItem, Envelope

# wire name -> attribute name; all optional, all strings on the wire
_STRING_FIELDS = {
    "Id": "id",
    "Name": "name",
    "Description": "description",
    "Path": "path",
    "Type": "type",
    "ModifiedBy": "modified_by",
}


def _load(payload: bytes) -> Any:
    try:
        text = payload.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise DecodeError(f"Response is not valid UTF-8: {exc}", subcode=DECODE_INVALID_ENCODING) from exc
    try:
        return json.loads(text)
    except json.JSONDecodeError as exc:
        raise DecodeError(f"Invalid JSON response: {exc}", subcode=DECODE_INVALID_JSON) from exc


def _parse_timestamp(value: Any) -> Optional[datetime]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise DecodeError(
            f"ModifiedDate must be a string, got {type(value).__name__}", subcode=DECODE_INVALID_FIELD
        )
    try:
        return datetime.fromisoformat(value)
    except ValueError as exc:
        raise DecodeError(f"ModifiedDate is not an ISO-8601 timestamp: {value!r}", subcode=DECODE_INVALID_FIELD) from exc


def _item_from_dict(obj: Any) -> CatalogItem:
    if not isinstance(obj, dict):
        raise DecodeError(
            f"Catalog item must be a JSON object, got {type(obj).__name__}", subcode=DECODE_UNEXPECTED_SHAPE
        )
    values: Dict[str, Any] = {}
    for wire, attr in _STRING_FIELDS.items():
        value = obj.get(wire)
        if value is not None and not isinstance(value, str):
            raise DecodeError(
                f"{wire} must be a string, got {type(value).__name__}",
                subcode=DECODE_INVALID_FIELD,
                details={"field": wire},
            )
        values[attr] = value
    values["modified_date"] = _parse_timestamp(obj.get("ModifiedDate"))
    return CatalogItem(data=obj, **values)


def decode_collection(payload: bytes) -> Envelope:
    """
    Unwrap a collection response.

    An empty ``value`` list is a valid, empty result. Fields the model does not know
    about are ignored.

    :param payload: Raw response body.
    :return: The envelope with its decoded items.
    :raises ~ssrs_sdk.core.errors.DecodeError: If the payload is not UTF-8 JSON, is not an
        object, lacks a ``value`` list, or carries a known field of the wrong type.
    """
    body = _load(payload)
    if not isinstance(body, dict):
        raise DecodeError("Collection response must be a JSON object", subcode=DECODE_UNEXPECTED_SHAPE)
    if "value" not in body:
        raise DecodeError("Collection response is missing the 'value' field", subcode=DECODE_UNEXPECTED_SHAPE)
    value = body["value"]
    if not isinstance(value, list):
        raise DecodeError("Collection 'value' must be a JSON array", subcode=DECODE_UNEXPECTED_SHAPE)
    context = body.get("@odata.context")
    if context is not None and not isinstance(context, str):
        raise DecodeError("'@odata.context' must be a string", subcode=DECODE_INVALID_FIELD)
    return Envelope(context=context, items=tuple(_item_from_dict(item) for item in value))


def decode_entity(payload: bytes) -> CatalogItem:
    """
    Decode a single-entity response (no envelope wrapper).

    :raises ~ssrs_sdk.core.errors.DecodeError: On the same structural failures as
        :func:`decode_collection`.
    """
    return _item_from_dict(_load(payload))
