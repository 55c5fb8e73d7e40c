"""
Response Dispatcher - runs a protocol codec behind a failure boundary

Replies are untrusted network input that drives each codec's cursor
directly. Whatever a codec raises while decoding is reported as
MalformedPacket; nothing escapes as an unexpected crash and no partially
decoded result is ever returned.
"""
from dataclasses import dataclass
from typing import TYPE_CHECKING

import structlog

from grokstat.exceptions import MalformedPacket
from grokstat.models import ServerEntry
from grokstat.protocols.base import DecodeResult

if TYPE_CHECKING:
    from grokstat.engine.registry import ProtocolEntry

logger = structlog.get_logger()


@dataclass(frozen=True)
class Packet:
    """Raw reply bytes plus the protocol id that routes them to a codec."""

    protocol_id: str
    data: bytes
    address: str = ""


class ResponseDispatcher:
    """Routes packets to their protocol's codec."""

    def handle(self, packet: Packet, entry: "ProtocolEntry") -> DecodeResult:
        """
        Decode a packet with the entry's codec.

        Args:
            packet: Reply to decode
            entry: Protocol entry registered for ``packet.protocol_id``

        Returns:
            ServerEntry, or a server list for master protocols

        Raises:
            MalformedPacket: Packet routed to another protocol's entry, decode
                failed, or decode produced the wrong kind of result
        """
        if packet.protocol_id != entry.id:
            raise MalformedPacket(
                f"Packet for {packet.protocol_id} routed to codec for {entry.id}",
                details={"protocol": packet.protocol_id, "entry": entry.id},
            )

        try:
            result = entry.protocol.decode(packet.data, entry.information)
        except MalformedPacket as exc:
            logger.info(
                "packet_decode_failed",
                protocol=packet.protocol_id,
                address=packet.address,
                size=len(packet.data),
                error=exc.message,
            )
            raise
        except Exception as exc:
            logger.info(
                "packet_decode_failed",
                protocol=packet.protocol_id,
                address=packet.address,
                size=len(packet.data),
                error=str(exc),
                error_type=type(exc).__name__,
            )
            raise MalformedPacket(
                f"Malformed packet: {exc}",
                details={"protocol": packet.protocol_id, "error_type": type(exc).__name__},
            ) from exc

        if entry.is_master:
            valid = isinstance(result, list) and all(isinstance(item, str) for item in result)
        else:
            valid = isinstance(result, ServerEntry)
        if not valid:
            raise MalformedPacket(
                f"Malformed packet: codec for {packet.protocol_id} returned {type(result).__name__}",
                details={"protocol": packet.protocol_id},
            )

        logger.debug("packet_decoded", protocol=packet.protocol_id, address=packet.address)
        return result
