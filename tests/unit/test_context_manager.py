# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""Unit tests for ReportServerClient async context manager support."""

import unittest
from unittest.mock import AsyncMock, MagicMock

import httpx

from ssrs_sdk import ReportServerClient
from ssrs_sdk.core._http import _HttpClient
from ssrs_sdk.core.config import ConnectionConfig, CredentialMode, Credentials
from ssrs_sdk.data._odata import _ODataClient

from tests.fixtures.test_data import SAMPLE_REPORTS_RESPONSE, SERVER_URL, make_client


def _handler(request):
    if request.url.path.endswith("/Session"):
        return httpx.Response(200, headers={"Set-Cookie": "sqlAuthCookie=abc123; Path=/"})
    return httpx.Response(200, json=SAMPLE_REPORTS_RESPONSE)


class TestContextManager(unittest.IsolatedAsyncioTestCase):
    """Test async context manager support on ReportServerClient."""

    def setUp(self):
        self.config = ConnectionConfig.build(SERVER_URL, CredentialMode.SESSION, Credentials("jdoe", "secret"))

    async def test_transport_created_lazily(self):
        client = make_client(_handler)
        self.assertIsNone(client._odata)
        await client.reports.list()
        self.assertIsInstance(client._odata, _ODataClient)
        await client.aclose()

    async def test_aenter_prepares_transport(self):
        client = make_client(_handler)
        result = await client.__aenter__()
        self.assertIs(result, client)
        self.assertIsInstance(client._odata._http, _HttpClient)
        await client.__aexit__(None, None, None)
        self.assertIsNone(client._odata)

    async def test_aexit_closes_http_client(self):
        client = ReportServerClient(self.config)
        mock_odata = MagicMock()
        mock_odata.close = AsyncMock()
        client._odata = mock_odata

        await client.__aexit__(None, None, None)

        mock_odata.close.assert_awaited_once()
        self.assertIsNone(client._odata)

    async def test_aclose_is_idempotent(self):
        client = make_client(_handler)
        await client.reports.list()
        await client.aclose()
        await client.aclose()
        self.assertIsNone(client._odata)

    async def test_aclose_discards_session_token(self):
        client = make_client(_handler, config=self.config)
        await client.authenticate_session()
        self.assertIsNotNone(client.session_token)

        await client.aclose()

        self.assertIsNone(client.session_token)

    async def test_exception_inside_block_still_closes(self):
        client = make_client(_handler)
        with self.assertRaises(RuntimeError):
            async with client:
                raise RuntimeError("boom")
        self.assertIsNone(client._odata)

    async def test_client_usable_after_close(self):
        client = make_client(_handler)
        async with client:
            await client.reports.list()
        async with client:
            reports = await client.reports.list()
        self.assertEqual(reports[0].name, "Sales")

    async def test_closed_http_client_refuses_requests(self):
        http = _HttpClient(httpx.AsyncClient(transport=httpx.MockTransport(_handler)))
        await http.close()
        with self.assertRaises(RuntimeError):
            await http._request("get", SERVER_URL)


if __name__ == "__main__":
    unittest.main()
