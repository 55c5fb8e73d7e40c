"""
OpenTTD Server Protocol - server detail query

TRANSPORT:
==========
  - UDP port 3979

REQUEST:
========
  PACKET_UDP_CLIENT_FIND_SERVER: 2-byte little-endian size (3) followed by
  the packet type byte (0). Built from the template
  ``{{.PreludeStarter}}\\x03{{.PreludeFinisher}}``.

REPLY LAYOUT:
=============
  [3-byte header][uint8 version v]
  [v>=4: uint8 n, n x (4-byte NewGRF id + 16-byte MD5)]
  [v>=3: uint32 BE current date, uint32 BE start date]
  [v>=2: uint8 max companies, uint8 current companies, uint8 max spectators]
  [server name\\0][server version\\0]
  [uint8 language][uint8 password][uint8 max clients][uint8 clients][uint8 spectators]
  [v<3: 2 reserved bytes x 2]
  [map name\\0][uint16 BE width][uint16 BE height][uint8 map set][uint8 dedicated]

The layout grows with each revision: later versions prepend fields, so the
version byte gates both which fields exist and where the rest start.
"""
from dataclasses import dataclass, field
from typing import Dict, List, Optional

from grokstat.engine.packet_reader import PacketReader
from grokstat.models import ProtocolEntryInfo, ServerEntry, TransportKind
from grokstat.protocols.base import Protocol

HEADER_SIZE = 3
NEWGRF_ID_SIZE = 4
NEWGRF_MD5_SIZE = 16


@dataclass
class OpenTTDServerInfo:
    """Every field the server-info reply can carry, as decoded."""

    protocol_version: int
    server_name: str
    server_version: str
    language_id: int
    need_pass: bool
    max_clients: int
    current_clients: int
    current_spectators: int
    map_name: str
    map_width: int
    map_height: int
    map_set: int
    dedicated: int
    newgrfs: List[str] = field(default_factory=list)
    time_current: int = 0
    time_start: int = 0
    # Absent below version 2; zero is a legitimate value.
    max_companies: Optional[int] = None
    current_companies: Optional[int] = None
    max_spectators: Optional[int] = None

    @property
    def newgrfs_summary(self) -> str:
        return "; ".join(self.newgrfs)

    def rules(self) -> Dict[str, str]:
        rules = {
            "protocol-version": str(self.protocol_version),
            "active-newgrfs-num": str(len(self.newgrfs)),
            "active-newgrfs": self.newgrfs_summary,
            "time-current": str(self.time_current),
            "time-start": str(self.time_start),
        }
        if self.max_companies is not None:
            rules["max-companies"] = str(self.max_companies)
        if self.current_companies is not None:
            rules["current-companies"] = str(self.current_companies)
        if self.max_spectators is not None:
            rules["max-spectators"] = str(self.max_spectators)
        rules.update({
            "server-name": self.server_name,
            "server-version": self.server_version,
            "language-id": str(self.language_id),
            "need-pass": "true" if self.need_pass else "false",
            "max-clients": str(self.max_clients),
            "current-clients": str(self.current_clients),
            "current-spectators": str(self.current_spectators),
            "map-name": self.map_name,
            "map-width": str(self.map_width),
            "map-height": str(self.map_height),
            "map-set": str(self.map_set),
            "dedicated": str(self.dedicated),
        })
        return rules

    def to_server_entry(self) -> ServerEntry:
        return ServerEntry(
            name=self.server_name,
            max_clients=self.max_clients,
            num_clients=self.current_clients,
            need_pass=self.need_pass,
            terrain=self.map_name,
            rules=self.rules(),
            players=[],
        )


def parse_server_info(data: bytes) -> OpenTTDServerInfo:
    """Decode a server-info reply. Raises PacketUnderflowError on short input."""
    reader = PacketReader(data)
    reader.skip(HEADER_SIZE)
    version = reader.read_uint8()

    newgrfs: List[str] = []
    if version >= 4:
        count = reader.read_uint8()
        for _ in range(count):
            grf_id = reader.read(NEWGRF_ID_SIZE).hex()
            grf_md5 = reader.read(NEWGRF_MD5_SIZE).hex()
            newgrfs.append(f"ID:{grf_id}/MD5:{grf_md5}")

    time_current = time_start = 0
    if version >= 3:
        time_current = reader.read_uint32()
        time_start = reader.read_uint32()

    max_companies = current_companies = max_spectators = None
    if version >= 2:
        max_companies = reader.read_uint8()
        current_companies = reader.read_uint8()
        max_spectators = reader.read_uint8()

    server_name = reader.read_string()
    server_version = reader.read_string()

    language_id = reader.read_uint8()
    need_pass = reader.read_bool()
    max_clients = reader.read_uint8()
    current_clients = reader.read_uint8()
    current_spectators = reader.read_uint8()

    if version < 3:
        # Reserved by older revisions
        reader.skip(2)
        reader.skip(2)

    map_name = reader.read_string()
    map_width = reader.read_uint16()
    map_height = reader.read_uint16()
    map_set = reader.read_uint8()
    dedicated = reader.read_uint8()

    return OpenTTDServerInfo(
        protocol_version=version,
        server_name=server_name,
        server_version=server_version,
        language_id=language_id,
        need_pass=need_pass,
        max_clients=max_clients,
        current_clients=current_clients,
        current_spectators=current_spectators,
        map_name=map_name,
        map_width=map_width,
        map_height=map_height,
        map_set=map_set,
        dedicated=dedicated,
        newgrfs=newgrfs,
        time_current=time_current,
        time_start=time_start,
        max_companies=max_companies,
        current_companies=current_companies,
        max_spectators=max_spectators,
    )


class OpenTTDServerProtocol(Protocol):
    """OpenTTD game server detail query."""

    name = "openttds"
    transport = TransportKind.UDP
    is_master = False

    def decode(self, data: bytes, info: ProtocolEntryInfo) -> ServerEntry:
        return parse_server_info(data).to_server_entry()
