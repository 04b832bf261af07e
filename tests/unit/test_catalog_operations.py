# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Unit tests for the typed catalog namespaces."""

import asyncio
import json

import httpx
import pytest

from ssrs_sdk.core.errors import DecodeError, ProtocolError
from ssrs_sdk.models.catalog_item import CatalogItem

from tests.fixtures.test_data import API_URL, FOLDER_ID, SAMPLE_FOLDER, make_client


class _Recorder:
    def __init__(self, response):
        self.response = response
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        return self.response


def _run(handler, op):
    async def main():
        async with make_client(handler) as client:
            return await op(client)

    return asyncio.run(main())


def test_create_folder_sends_folder_type():
    server = _Recorder(httpx.Response(201, json=SAMPLE_FOLDER))
    folder = _run(server, lambda c: c.folders.create_folder("Test Folder"))

    request = server.requests[0]
    assert request.method == "POST"
    assert str(request.url) == API_URL + "/Folders"
    assert json.loads(request.content) == {"Name": "Test Folder", "Path": "/", "Type": "Folder"}
    assert isinstance(folder, CatalogItem)
    assert folder.id == FOLDER_ID
    assert folder.type == "Folder"


def test_create_folder_under_parent():
    server = _Recorder(httpx.Response(201, json=SAMPLE_FOLDER))
    _run(server, lambda c: c.folders.create_folder("Monthly", parent_path="/Sales"))
    assert json.loads(server.requests[0].content)["Path"] == "/Sales"


def test_get_by_key(sample_guid):
    server = _Recorder(httpx.Response(200, json=SAMPLE_FOLDER))
    item = _run(server, lambda c: c.folders.get(sample_guid.upper()))
    assert str(server.requests[0].url) == f"{API_URL}/Folders({sample_guid})"
    assert item.name == "Test Folder"


def test_update_with_no_content_returns_none(sample_guid):
    server = _Recorder(httpx.Response(204))
    result = _run(server, lambda c: c.reports.update(sample_guid, {"Description": "Monthly sales"}))
    assert result is None
    assert server.requests[0].method == "PUT"
    assert json.loads(server.requests[0].content) == {"Description": "Monthly sales"}


def test_update_with_body_returns_item(sample_guid):
    server = _Recorder(httpx.Response(200, json=SAMPLE_FOLDER))
    result = _run(server, lambda c: c.folders.update(sample_guid, {"Name": "Test Folder"}))
    assert result.name == "Test Folder"


def test_delete(sample_guid):
    server = _Recorder(httpx.Response(204))
    assert _run(server, lambda c: c.data_sources.delete(sample_guid)) is True
    assert server.requests[0].method == "DELETE"
    assert str(server.requests[0].url) == f"{API_URL}/DataSources({sample_guid})"


def test_select_projection_decodes_without_id():
    server = _Recorder(httpx.Response(200, json={"value": [{"Name": "Sales", "Path": "/Sales"}]}))
    items = _run(server, lambda c: c.reports.list(select="Name,Path"))
    assert server.requests[0].url.params["$select"] == "Name,Path"
    assert items[0].id is None
    assert items[0].path == "/Sales"


def test_list_rejects_malformed_payload():
    server = _Recorder(httpx.Response(200, json={"items": []}))
    with pytest.raises(DecodeError):
        _run(server, lambda c: c.datasets.list())


def test_invalid_key_never_sent():
    server = _Recorder(httpx.Response(200, json=SAMPLE_FOLDER))
    with pytest.raises(ProtocolError):
        _run(server, lambda c: c.reports.get("Sales"))
    assert server.requests == []
