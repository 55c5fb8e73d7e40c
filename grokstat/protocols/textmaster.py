"""
Line-delimited text master list

Master servers of this style answer a bare TCP connect with a single line
of ``host:port`` entries separated by whitespace or semicolons.
"""
import re
from typing import List

from grokstat.exceptions import MalformedPacket
from grokstat.models import ProtocolEntryInfo, TransportKind
from grokstat.protocols.base import Protocol

SEPARATORS = re.compile(r"[\s;]+")


class TextMasterProtocol(Protocol):
    """Master list delivered as one line of text over TCP."""

    name = "textmaster"
    transport = TransportKind.TCP
    is_master = True

    def build_request(self, info: ProtocolEntryInfo) -> bytes:
        # The connection itself is the request unless a template says otherwise
        if not info.get(self.template_field):
            return b""
        return super().build_request(info)

    def decode(self, data: bytes, info: ProtocolEntryInfo) -> List[str]:
        text = data.decode("ascii")
        servers = [entry for entry in SEPARATORS.split(text.strip()) if entry]
        for entry in servers:
            host, sep, port = entry.rpartition(":")
            if not sep or not host or not port.isdigit():
                raise MalformedPacket(
                    f"Malformed packet: '{entry}' is not a host:port pair",
                    details={"entry": entry},
                )
        return servers
