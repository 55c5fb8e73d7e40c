"""
Transport Abstraction Layer

Provides one transport implementation per wire transport a protocol can use.
Each call is exactly one round trip: no retry, no connection reuse.
"""
import asyncio
from abc import ABC, abstractmethod
from typing import Dict, Optional, Type

import structlog

from grokstat.config import settings
from grokstat.exceptions import (
    ConnectError,
    EmptyResponse,
    QueryTimeoutError,
    ReceiveError,
    SendError,
    TransportError,
)
from grokstat.models import TransportKind

logger = structlog.get_logger()


class Transport(ABC):
    """
    Abstract base class for all transport implementations.

    Transports handle the actual network communication with servers.
    Each transport type implements its own connection, send, and receive logic.
    """

    kind: TransportKind

    def __init__(
        self,
        host: str,
        port: int,
        timeout_sec: Optional[float] = None,
        max_response_bytes: Optional[int] = None,
    ):
        """
        Initialize transport.

        Args:
            host: Server hostname or IP
            port: Server port
            timeout_sec: Deadline for the round trip (defaults to settings)
            max_response_bytes: Upper bound on the reply size (defaults to settings)
        """
        self.host = host
        self.port = port
        self.timeout_sec = settings.query_timeout_sec if timeout_sec is None else timeout_sec
        self.max_response_bytes = (
            settings.max_response_bytes if max_response_bytes is None else max_response_bytes
        )

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @abstractmethod
    async def query(self, data: bytes) -> bytes:
        """
        Send a request and return the server's reply.

        Args:
            data: Request bytes

        Returns:
            Reply bytes, never empty

        Raises:
            ConnectError: Socket could not be established
            QueryTimeoutError: Deadline elapsed before a reply arrived
            EmptyResponse: Reply had no content
            TransportError: Any other communication failure
        """
        pass


class UDPTransport(Transport):
    """
    UDP datagram transport implementation.

    Sends one datagram from an ephemeral local port and waits for one reply.
    Trailing NUL padding is stripped from the reply.
    """

    kind = TransportKind.UDP

    async def query(self, data: bytes) -> bytes:
        loop = asyncio.get_running_loop()
        response_future: asyncio.Future[bytes] = loop.create_future()
        max_bytes = self.max_response_bytes

        class _UDPClient(asyncio.DatagramProtocol):
            def __init__(self):
                self.transport: Optional[asyncio.transports.DatagramTransport] = None

            def connection_made(self, transport: asyncio.BaseTransport) -> None:
                self.transport = transport  # type: ignore
                self.transport.sendto(data)

            def datagram_received(self, received_data: bytes, addr: tuple) -> None:
                if not response_future.done():
                    response_future.set_result(received_data[:max_bytes])

            def error_received(self, exc: Optional[Exception]) -> None:
                if not response_future.done():
                    response_future.set_exception(
                        exc or TransportError("udp_error")
                    )

        transport: Optional[asyncio.transports.DatagramTransport] = None
        try:
            try:
                transport, _ = await loop.create_datagram_endpoint(
                    _UDPClient,
                    remote_addr=(self.host, self.port),
                )
            except OSError as exc:
                raise ConnectError(
                    f"Cannot open UDP socket to {self.address}: {exc}",
                    details={"error": str(exc)},
                ) from exc

            logger.debug("udp_query_sent", address=self.address, size=len(data))

            try:
                response = await asyncio.wait_for(response_future, timeout=self.timeout_sec)
            except asyncio.TimeoutError:
                logger.debug("server_timeout", address=self.address, phase="udp")
                raise QueryTimeoutError(
                    f"No reply from {self.address} within {self.timeout_sec:g}s",
                    details={"timeout_sec": self.timeout_sec},
                )
            except OSError as exc:
                raise ReceiveError(
                    f"UDP receive from {self.address} failed: {exc}",
                    details={"error": str(exc)},
                ) from exc

        finally:
            if transport:
                transport.close()

        payload = response.rstrip(b"\x00")
        if not payload:
            raise EmptyResponse("No response from server", details={"address": self.address})
        logger.debug("udp_reply_received", address=self.address, size=len(payload))
        return payload


class TCPTransport(Transport):
    """
    TCP stream transport implementation.

    Connects, sends the request if there is one, and reads a single line.
    """

    kind = TransportKind.TCP

    async def query(self, data: bytes) -> bytes:
        writer: Optional[asyncio.StreamWriter] = None

        try:
            try:
                reader, writer = await asyncio.wait_for(
                    asyncio.open_connection(self.host, self.port, limit=self.max_response_bytes),
                    timeout=self.timeout_sec,
                )
            except asyncio.TimeoutError:
                raise QueryTimeoutError(
                    f"Connection timeout to {self.address}",
                    details={"timeout_sec": self.timeout_sec, "phase": "connect"},
                )
            except OSError as exc:
                raise ConnectError(
                    f"Cannot connect to {self.address}: {exc}",
                    details={"error": str(exc)},
                ) from exc

            if data:
                try:
                    writer.write(data)
                    await writer.drain()
                except OSError as exc:
                    raise SendError(
                        f"Failed to send data to {self.address}",
                        details={"error": str(exc), "data_size": len(data)},
                    ) from exc

            try:
                line = await asyncio.wait_for(reader.readline(), timeout=self.timeout_sec)
            except asyncio.TimeoutError:
                logger.debug("server_timeout", address=self.address, phase="read")
                raise QueryTimeoutError(
                    f"No reply from {self.address} within {self.timeout_sec:g}s",
                    details={"timeout_sec": self.timeout_sec, "phase": "read"},
                )
            except (OSError, ValueError) as exc:
                # ValueError: line longer than max_response_bytes
                raise ReceiveError(
                    f"TCP receive from {self.address} failed: {exc}",
                    details={"error": str(exc)},
                ) from exc

        finally:
            if writer:
                writer.close()
                try:
                    await writer.wait_closed()
                except OSError as e:
                    logger.warning(
                        "tcp_writer_close_failed",
                        address=self.address,
                        error=str(e),
                        error_type=type(e).__name__,
                    )

        if not line:
            raise EmptyResponse("No response from server", details={"address": self.address})
        logger.debug("tcp_line_received", address=self.address, size=len(line))
        return line


class TransportFactory:
    """
    Factory for creating transport instances.

    The transport kind comes from the protocol entry being queried.
    """

    _TRANSPORTS: Dict[TransportKind, Type[Transport]] = {
        TransportKind.UDP: UDPTransport,
        TransportKind.TCP: TCPTransport,
    }

    @classmethod
    def create_transport(
        cls,
        kind: TransportKind,
        host: str,
        port: int,
        timeout_sec: Optional[float] = None,
    ) -> Transport:
        """
        Create the transport for the given kind.

        Args:
            kind: TransportKind of the protocol
            host: Server host
            port: Server port
            timeout_sec: Optional deadline override

        Returns:
            Transport instance (TCP or UDP)
        """
        try:
            transport_cls = cls._TRANSPORTS[TransportKind(kind)]
        except (KeyError, ValueError):
            raise TransportError(f"Unsupported transport: {kind}", details={"transport": str(kind)})
        return transport_cls(host, port, timeout_sec)
