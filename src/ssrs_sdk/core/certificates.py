# Copyright (c) Microsoft Corporation.
# Licensed under the MIT license.

"""
Pluggable server-certificate validation.

A certificate policy is a plain callable that receives a :class:`CertificateCheck`
(the presented chain plus the native validation errors) and returns a
:class:`PolicyDecision`. Policies hold no state and can be unit-tested in isolation.

Two policies ship with the SDK:

- :func:`default_policy` accepts only when native validation succeeded.
- :func:`ignore_policy` accepts everything and is refused by
  :meth:`~ssrs_sdk.core.config.ConnectionConfig.build` for production profiles.

The policy is enforced by :class:`_PolicyTransport`, an ``httpx`` transport that
probes each HTTPS origin before the first request is dispatched to it.
"""

from __future__ import annotations

import asyncio
import logging
import ssl
from dataclasses import dataclass, field
from typing import Awaitable, Callable, Dict, Optional, Tuple

import httpx

from ._error_codes import TRANSPORT_CERTIFICATE_REJECTED, TRANSPORT_CONNECT, TRANSPORT_TIMEOUT
from .errors import TimeoutError, TransportError

logger = logging.getLogger(__name__)

_DEFAULT_PROBE_TIMEOUT = 10.0


@dataclass(frozen=True)
class CertificateCheck:
    """
    Input to a certificate policy.

    :param host: Server host name.
    :param port: Server port.
    :param chain: DER-encoded certificates presented by the server, leaf first. On
        Python 3.13+ this is the full presented chain (leaf, intermediates, and the
        root when the server sends it). Older interpreters expose only the leaf.
    :param errors: Native validation errors; empty when native validation succeeded.
    """

    host: str
    port: int
    chain: Tuple[bytes, ...] = ()
    errors: Tuple[str, ...] = ()

    @property
    def natively_valid(self) -> bool:
        return not self.errors


@dataclass(frozen=True)
class PolicyDecision:
    accepted: bool
    reason: Optional[str] = None


CertificatePolicy = Callable[[CertificateCheck], PolicyDecision]
CertificateProbe = Callable[[str, int], Awaitable[CertificateCheck]]


def default_policy(check: CertificateCheck) -> PolicyDecision:
    """Accept only certificates that passed native validation."""
    if check.natively_valid:
        return PolicyDecision(True)
    return PolicyDecision(False, "native certificate validation failed: " + "; ".join(check.errors))


def ignore_policy(check: CertificateCheck) -> PolicyDecision:
    """Accept any certificate. Intended for development servers with self-signed certificates."""
    return PolicyDecision(True, "certificate validation disabled")


def _unverified_context() -> ssl.SSLContext:
    ctx = ssl.create_default_context()
    ctx.check_hostname = False
    ctx.verify_mode = ssl.CERT_NONE
    return ctx


def verifying_context() -> ssl.SSLContext:
    """Return a context validating against the platform trust store, with hostname checks."""
    return ssl.create_default_context()


def _presented_chain(ssl_object: Optional[ssl.SSLObject]) -> Tuple[bytes, ...]:
    if ssl_object is None:
        return ()
    # Python 3.13+ exposes the full presented chain; older versions only the leaf.
    unverified_chain = getattr(ssl_object, "get_unverified_chain", None)
    if unverified_chain is not None:
        chain = tuple(unverified_chain() or ())
        if chain:
            return chain
    leaf = ssl_object.getpeercert(binary_form=True)
    return (leaf,) if leaf else ()


async def _handshake(host: str, port: int, context: ssl.SSLContext, timeout: float) -> Tuple[bytes, ...]:
    _, writer = await asyncio.wait_for(
        asyncio.open_connection(host, port, ssl=context, server_hostname=host),
        timeout,
    )
    try:
        return _presented_chain(writer.get_extra_info("ssl_object"))
    finally:
        writer.close()
        await writer.wait_closed()


async def probe_certificate(
    host: str,
    port: int,
    timeout: float = _DEFAULT_PROBE_TIMEOUT,
    context: Optional[ssl.SSLContext] = None,
) -> CertificateCheck:
    """
    Perform a TLS handshake against ``host:port`` and report the native validation result.

    The first handshake validates with ``context``, which must be the same context the
    verified transport uses so both judge the certificate alike. It defaults to
    :func:`verifying_context`. When it fails certificate verification, a second,
    unverified handshake captures the presented chain so the policy can still inspect it.

    :raises ~ssrs_sdk.core.errors.TimeoutError: If a handshake exceeds ``timeout``.
    :raises ~ssrs_sdk.core.errors.TransportError: If the host cannot be reached.
    """
    url = f"https://{host}:{port}"
    try:
        try:
            chain = await _handshake(host, port, context or verifying_context(), timeout)
            return CertificateCheck(host, port, chain)
        except ssl.SSLCertVerificationError as exc:
            error = exc.verify_message or str(exc)
        chain = await _handshake(host, port, _unverified_context(), timeout)
        return CertificateCheck(host, port, chain, (error,))
    except asyncio.TimeoutError as exc:
        raise TimeoutError(
            f"TLS handshake with {host}:{port} timed out after {timeout} seconds",
            url=url,
            subcode=TRANSPORT_TIMEOUT,
        ) from exc
    except OSError as exc:
        raise TransportError(f"Connection error: {exc}", url=url, subcode=TRANSPORT_CONNECT) from exc


class _PolicyTransport(httpx.AsyncBaseTransport):
    """
    ``httpx`` transport that enforces a certificate policy before dispatching requests.

    Accepted origins are remembered for the lifetime of the transport. An origin
    accepted despite native validation errors is routed through the insecure inner
    transport, which skips native verification. Rejections are never cached, so
    every call to a rejected origin re-probes and fails before it is sent.

    :param policy: Certificate policy to apply.
    :param verified: Inner transport performing native certificate verification.
    :param insecure_factory: Builds the inner transport used for origins accepted
        despite native errors. Called lazily, at most once.
    :param probe: Coroutine returning a :class:`CertificateCheck` for ``(host, port)``.
    """

    def __init__(
        self,
        policy: CertificatePolicy,
        *,
        verified: httpx.AsyncBaseTransport,
        insecure_factory: Callable[[], httpx.AsyncBaseTransport],
        probe: CertificateProbe,
    ) -> None:
        self._policy = policy
        self._verified = verified
        self._insecure_factory = insecure_factory
        self._insecure: Optional[httpx.AsyncBaseTransport] = None
        self._probe = probe
        # origin -> True when natively valid, False when accepted despite errors
        self._accepted: Dict[Tuple[str, int], bool] = {}

    async def _check_origin(self, host: str, port: int) -> bool:
        origin = (host, port)
        if origin in self._accepted:
            return self._accepted[origin]
        check = await self._probe(host, port)
        decision = self._policy(check)
        if not decision.accepted:
            reason = decision.reason or "certificate rejected by policy"
            logger.warning("Rejected server certificate for %s:%s: %s", host, port, reason)
            raise TransportError(
                f"Server certificate for {host}:{port} was rejected: {reason}",
                reason=reason,
                url=f"https://{host}:{port}",
                subcode=TRANSPORT_CERTIFICATE_REJECTED,
            )
        if not check.natively_valid:
            logger.warning(
                "Accepting server certificate for %s:%s despite validation errors: %s",
                host,
                port,
                "; ".join(check.errors),
            )
        self._accepted[origin] = check.natively_valid
        return check.natively_valid

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        if request.url.scheme != "https":
            return await self._verified.handle_async_request(request)
        host = request.url.host
        port = request.url.port or 443
        if await self._check_origin(host, port):
            return await self._verified.handle_async_request(request)
        if self._insecure is None:
            self._insecure = self._insecure_factory()
        return await self._insecure.handle_async_request(request)

    async def aclose(self) -> None:
        await self._verified.aclose()
        if self._insecure is not None and self._insecure is not self._verified:
            await self._insecure.aclose()
        self._insecure = None


__all__ = [
    "CertificateCheck",
    "PolicyDecision",
    "CertificatePolicy",
    "CertificateProbe",
    "default_policy",
    "ignore_policy",
    "probe_certificate",
    "verifying_context",
]
