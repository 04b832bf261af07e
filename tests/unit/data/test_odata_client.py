# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Unit tests for _ODataClient URL composition and body handling."""

import json
import unittest

import httpx

from ssrs_sdk.core._error_codes import VALIDATION_INVALID_BODY
from ssrs_sdk.core._http import _HttpClient
from ssrs_sdk.core.errors import ProtocolError
from ssrs_sdk.data._odata import _ODataClient
from ssrs_sdk.models.resource_path import Collection, ResourcePath

from tests.fixtures.test_data import API_URL, FOLDER_ID, SAMPLE_FOLDER


class TestODataClient(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.requests = []

        def handler(request):
            self.requests.append(request)
            if request.method == "DELETE":
                return httpx.Response(204)
            if request.method == "PUT":
                return httpx.Response(204)
            return httpx.Response(200, json=SAMPLE_FOLDER)

        self.od = _ODataClient(
            _HttpClient(httpx.AsyncClient(transport=httpx.MockTransport(handler))),
            API_URL + "/",
        )

    async def asyncTearDown(self):
        await self.od.close()

    def test_api_root_trailing_slash_dropped(self):
        self.assertEqual(self.od.api, API_URL)

    def test_url_composition(self):
        path = ResourcePath(Collection.FOLDERS, key=FOLDER_ID)
        self.assertEqual(self.od._url(path), f"{API_URL}/Folders({FOLDER_ID})")

    async def test_get_sends_no_body(self):
        await self.od.get(ResourcePath(Collection.FOLDERS))
        request = self.requests[0]
        self.assertEqual(request.method, "GET")
        self.assertEqual(request.content, b"")
        self.assertNotIn("Content-Type", request.headers)

    async def test_post_mapping_encoded_as_json(self):
        body = {"Name": "Test Folder", "Path": "/", "Type": "Folder"}
        payload = await self.od.post(ResourcePath(Collection.FOLDERS), body)

        request = self.requests[0]
        self.assertEqual(request.method, "POST")
        self.assertEqual(str(request.url), f"{API_URL}/Folders")
        self.assertEqual(request.headers["Content-Type"], "application/json")
        self.assertEqual(json.loads(request.content), body)
        self.assertEqual(json.loads(payload), SAMPLE_FOLDER)

    async def test_raw_bytes_and_text_passed_through(self):
        await self.od.post(ResourcePath(Collection.FOLDERS), b'{"Name":"A"}')
        await self.od.post(ResourcePath(Collection.FOLDERS), '{"Name":"B"}')
        self.assertEqual(self.requests[0].content, b'{"Name":"A"}')
        self.assertEqual(self.requests[1].content, b'{"Name":"B"}')

    async def test_put_returns_empty_payload_on_204(self):
        payload = await self.od.put(ResourcePath(Collection.FOLDERS, key=FOLDER_ID), {"Description": "d"})
        self.assertEqual(payload, b"")
        self.assertEqual(self.requests[0].method, "PUT")

    async def test_delete_returns_true(self):
        self.assertTrue(await self.od.delete(ResourcePath(Collection.FOLDERS, key=FOLDER_ID)))
        self.assertEqual(self.requests[0].method, "DELETE")

    async def test_unserializable_body_rejected_before_io(self):
        with self.assertRaises(ProtocolError) as ctx:
            await self.od.post(ResourcePath(Collection.FOLDERS), {"Name": object()})
        self.assertEqual(ctx.exception.subcode, VALIDATION_INVALID_BODY)
        self.assertEqual(self.requests, [])

    async def test_invalid_key_rejected_before_io(self):
        with self.assertRaises(ProtocolError):
            await self.od.get(ResourcePath(Collection.REPORTS, key="Sales"))
        self.assertEqual(self.requests, [])


if __name__ == "__main__":
    unittest.main()
