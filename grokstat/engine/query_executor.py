"""
Query Executor - drives one query through the full pipeline.

Component Overview:
-------------------
registry lookup -> request builder -> transport -> response dispatcher -> codec

Each call owns its socket and buffers; the registry is only read, so one
executor can serve any number of concurrent callers.

Error Handling:
--------------
Nothing is retried. The first failure surfaces as the GrokstatError
subclass describing it:
- UnknownProtocol -> protocol id not configured (no I/O performed)
- InvalidAddressError -> host string unusable
- ConnectError / SendError / ReceiveError -> TransportError
- QueryTimeoutError -> deadline elapsed
- EmptyResponse -> nothing came back
- MalformedPacket -> reply could not be decoded
"""
from __future__ import annotations

import time
from typing import Optional, Tuple
from urllib.parse import urlsplit

import structlog

from grokstat.engine.dispatcher import Packet, ResponseDispatcher
from grokstat.engine.registry import ProtocolEntry, ProtocolRegistry
from grokstat.engine.transport import TransportFactory
from grokstat.exceptions import InvalidAddressError
from grokstat.models import QueryResult, ServerEntry

logger = structlog.get_logger()


def parse_address(host: str, default_port: str) -> Tuple[str, int]:
    """
    Split ``host`` into a host name and port.

    Accepts ``host``, ``host:port``, ``[v6]:port`` and any of those behind a
    ``scheme://`` prefix. ``default_port`` fills in a missing port.
    """
    text = host.strip()
    if not text:
        raise InvalidAddressError("Please specify a valid IP.")
    if "://" not in text:
        text = "placeholder://" + text

    try:
        parts = urlsplit(text)
        hostname = parts.hostname
        port = parts.port
    except ValueError as exc:
        raise InvalidAddressError(f"Invalid address '{host}': {exc}", details={"host": host}) from exc

    if not hostname:
        raise InvalidAddressError(f"Invalid address '{host}'", details={"host": host})

    if port is None:
        try:
            port = int(default_port)
        except ValueError:
            raise InvalidAddressError(
                f"No port in '{host}' and no usable default port",
                details={"host": host, "default_port": default_port},
            )
    return hostname, port


class QueryExecutor:
    """Runs single-host queries against registered protocols."""

    def __init__(
        self,
        registry: ProtocolRegistry,
        dispatcher: Optional[ResponseDispatcher] = None,
        timeout_sec: Optional[float] = None,
    ):
        self.registry = registry
        self.dispatcher = dispatcher or ResponseDispatcher()
        self.timeout_sec = timeout_sec

    async def query(self, protocol_id: str, host: str) -> QueryResult:
        """
        Query one host.

        Args:
            protocol_id: Registered protocol id
            host: Host, optionally with port and scheme

        Returns:
            QueryResult with ``server_info`` or, for master protocols, ``servers``
        """
        entry = self.registry.get(protocol_id)
        hostname, port = parse_address(host, entry.default_port)
        response = await self.fetch(entry, hostname, port)

        result = self.dispatcher.handle(
            Packet(protocol_id=entry.id, data=response, address=f"{hostname}:{port}"),
            entry,
        )
        if isinstance(result, ServerEntry):
            return QueryResult(protocol=entry.id, host=f"{hostname}:{port}", server_info=result)
        return QueryResult(protocol=entry.id, host=f"{hostname}:{port}", servers=result)

    async def fetch(self, entry: ProtocolEntry, hostname: str, port: int) -> bytes:
        """Perform the round trip for ``entry`` and return the raw reply."""
        request = entry.build_request()
        transport = TransportFactory.create_transport(
            entry.transport, hostname, port, timeout_sec=self.timeout_sec
        )

        start_time = time.time()
        try:
            return await transport.query(request)
        finally:
            logger.info(
                "server_queried",
                protocol=entry.id,
                address=transport.address,
                transport=entry.transport.value,
                elapsed_ms=round((time.time() - start_time) * 1000, 2),
            )
