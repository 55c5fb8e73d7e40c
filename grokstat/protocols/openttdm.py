"""
OpenTTD Master Server Protocol - server list query

- Transport: UDP, port 3978.
- Request: PACKET_UDP_CLIENT_GET_LIST (size 5, type 6), master protocol
  version 2, list type 0 (IPv4).
- Reply: PACKET_UDP_MASTER_RESPONSE_LIST. After the 3-byte header comes the
  list type plus one (1 = IPv4, 2 = IPv6), a little-endian uint16 count and
  that many (address, little-endian uint16 port) pairs.
"""
import ipaddress
from typing import List

from grokstat.engine.packet_reader import PacketReader
from grokstat.exceptions import MalformedPacket
from grokstat.models import ProtocolEntryInfo, TransportKind
from grokstat.protocols.base import Protocol

HEADER_SIZE = 3
ADDRESS_SIZES = {1: 4, 2: 16}


def parse_server_list(data: bytes) -> List[str]:
    reader = PacketReader(data)
    reader.skip(HEADER_SIZE)
    list_type = reader.read_uint8()
    if list_type not in ADDRESS_SIZES:
        raise MalformedPacket(
            f"Malformed packet: unknown server list type {list_type}",
            details={"list_type": list_type},
        )
    address_size = ADDRESS_SIZES[list_type]

    servers = []
    for _ in range(reader.read_uint16(endian="little")):
        address = ipaddress.ip_address(reader.read(address_size))
        port = reader.read_uint16(endian="little")
        if address.version == 6:
            servers.append(f"[{address}]:{port}")
        else:
            servers.append(f"{address}:{port}")
    return servers


class OpenTTDMasterProtocol(Protocol):
    """OpenTTD master server list query."""

    name = "openttdm"
    transport = TransportKind.UDP
    is_master = True

    def decode(self, data: bytes, info: ProtocolEntryInfo) -> List[str]:
        return parse_server_list(data)
