# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Certificate policy tests against a local TLS server.

The server presents ``server-fullchain.pem`` (leaf plus intermediate) issued by the
test root in ``tests/fixtures/certs``, so it is untrusted unless a context loads
``root-ca.pem``.
"""

import asyncio
import json
import ssl
import unittest
from pathlib import Path

import httpx

from ssrs_sdk import ReportServerClient
from ssrs_sdk.core._error_codes import TRANSPORT_CERTIFICATE_REJECTED
from ssrs_sdk.core.certificates import default_policy, ignore_policy, probe_certificate
from ssrs_sdk.core.config import ConnectionConfig
from ssrs_sdk.core.errors import TransportError

from tests.fixtures.test_data import SAMPLE_REPORTS_RESPONSE

CERTS = Path(__file__).resolve().parents[2] / "fixtures" / "certs"
ROOT_CA = CERTS / "root-ca.pem"
SERVER_CHAIN = CERTS / "server-fullchain.pem"
SERVER_KEY = CERTS / "server-key.pem"

HAS_FULL_CHAIN = hasattr(ssl.SSLObject, "get_unverified_chain")


def _der_certificates(path):
    """DER bytes of every certificate in a PEM bundle, in file order."""
    marker = "-----END CERTIFICATE-----"
    blocks = [b.strip() + "\n" + marker + "\n" for b in path.read_text().split(marker) if b.strip()]
    return [ssl.PEM_cert_to_DER_cert(b) for b in blocks]


class _TlsServer:
    """Minimal HTTPS server answering every request with the sample reports payload."""

    def __init__(self):
        self.requests = []
        self._server = None
        self.port = None

    async def start(self):
        context = ssl.SSLContext(ssl.PROTOCOL_TLS_SERVER)
        context.load_cert_chain(SERVER_CHAIN, SERVER_KEY)
        self._server = await asyncio.start_server(self._handle, "127.0.0.1", 0, ssl=context)
        self.port = self._server.sockets[0].getsockname()[1]

    async def stop(self):
        self._server.close()
        await self._server.wait_closed()

    @property
    def url(self):
        return f"https://127.0.0.1:{self.port}"

    async def _handle(self, reader, writer):
        try:
            head = await reader.readuntil(b"\r\n\r\n")
        except (asyncio.IncompleteReadError, OSError):
            # handshake-only connections close without sending a request
            writer.close()
            return
        self.requests.append(head.split(b"\r\n", 1)[0].decode("ascii"))
        body = json.dumps(SAMPLE_REPORTS_RESPONSE).encode("utf-8")
        writer.write(
            b"HTTP/1.1 200 OK\r\n"
            b"Content-Type: application/json\r\n"
            b"Content-Length: " + str(len(body)).encode("ascii") + b"\r\n"
            b"Connection: close\r\n\r\n" + body
        )
        await writer.drain()
        writer.close()


class TestHandshakeWithLocalServer(unittest.IsolatedAsyncioTestCase):
    async def asyncSetUp(self):
        self.server = _TlsServer()
        await self.server.start()
        self.presented = _der_certificates(SERVER_CHAIN)

    async def asyncTearDown(self):
        await self.server.stop()

    async def test_untrusted_server_reports_errors_and_leaf(self):
        check = await probe_certificate("127.0.0.1", self.server.port, timeout=5)

        self.assertFalse(check.natively_valid)
        self.assertTrue(check.errors)
        self.assertEqual(check.chain[0], self.presented[0])

    @unittest.skipUnless(HAS_FULL_CHAIN, "full presented chain requires Python 3.13+")
    async def test_untrusted_server_chain_includes_intermediate(self):
        check = await probe_certificate("127.0.0.1", self.server.port, timeout=5)

        self.assertEqual(list(check.chain), self.presented)

    async def test_trusting_context_validates_natively(self):
        context = ssl.create_default_context(cafile=str(ROOT_CA))
        check = await probe_certificate("127.0.0.1", self.server.port, timeout=5, context=context)

        self.assertTrue(check.natively_valid)
        self.assertEqual(check.chain[0], self.presented[0])

    @unittest.skipUnless(HAS_FULL_CHAIN, "full presented chain requires Python 3.13+")
    async def test_pinning_policy_can_match_intermediate(self):
        intermediate = self.presented[1]
        check = await probe_certificate("127.0.0.1", self.server.port, timeout=5)

        self.assertIn(intermediate, check.chain[1:])

    async def test_unreachable_port_is_connect_error(self):
        port = self.server.port
        await self.server.stop()

        with self.assertRaises(TransportError) as ctx:
            await probe_certificate("127.0.0.1", port, timeout=5)
        self.assertIsNone(ctx.exception.reason)


class TestClientOverTls(unittest.IsolatedAsyncioTestCase):
    """Full client over the real handshake check and real httpx transports."""

    async def asyncSetUp(self):
        self.server = _TlsServer()
        await self.server.start()

    async def asyncTearDown(self):
        await self.server.stop()

    def _config(self, **kwargs):
        return ConnectionConfig.build(self.server.url, http_timeout=5, **kwargs)

    async def test_default_policy_rejects_untrusted_certificate(self):
        async with ReportServerClient(self._config()) as client:
            with self.assertRaises(TransportError) as ctx:
                await client.reports.list()

        err = ctx.exception
        self.assertEqual(err.subcode, TRANSPORT_CERTIFICATE_REJECTED)
        self.assertIsNotNone(err.reason)
        self.assertIn("native certificate validation failed", err.reason)
        self.assertEqual(self.server.requests, [])

    async def test_ignore_policy_uses_unverified_transport(self):
        async with ReportServerClient(self._config(certificate_policy=ignore_policy)) as client:
            reports = await client.reports.list()
            policy_transport = client._odata._http._client._transport
            self.assertIsInstance(policy_transport._insecure, httpx.AsyncHTTPTransport)
            self.assertIsNot(policy_transport._insecure, policy_transport._verified)

        self.assertEqual([r.name for r in reports], ["Sales"])
        self.assertEqual(self.server.requests, ["GET /Reports/api/v2.0/Reports HTTP/1.1"])

    async def test_handshake_and_transport_share_trusted_context(self):
        context = ssl.create_default_context(cafile=str(ROOT_CA))
        config = self._config(certificate_policy=default_policy, ssl_context=context)

        async with ReportServerClient(config) as client:
            reports = await client.reports.list()
            policy_transport = client._odata._http._client._transport
            self.assertIsNone(policy_transport._insecure)

        self.assertEqual([r.name for r in reports], ["Sales"])
        self.assertEqual(len(self.server.requests), 1)


if __name__ == "__main__":
    unittest.main()
