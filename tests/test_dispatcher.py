"""
Tests for the ResponseDispatcher failure boundary.
"""
from types import MappingProxyType

import pytest

from grokstat.engine.dispatcher import Packet, ResponseDispatcher
from grokstat.engine.registry import ProtocolEntry
from grokstat.exceptions import MalformedPacket
from grokstat.models import ServerEntry, TransportKind
from grokstat.protocols.base import Protocol
from grokstat.protocols.openttds import OpenTTDServerProtocol

from payloads import build_server_info


class ExplodingProtocol(Protocol):
    name = "exploding"

    def __init__(self, exc: Exception):
        self.exc = exc

    def decode(self, data, info):
        raise self.exc


class WrongShapeMaster(Protocol):
    name = "wrongshape"
    transport = TransportKind.TCP
    is_master = True

    def decode(self, data, info):
        return ServerEntry(name="not a list")


def _entry(protocol: Protocol, protocol_id: str = "test") -> ProtocolEntry:
    return ProtocolEntry(id=protocol_id, protocol=protocol, information=MappingProxyType({}))


def test_valid_packet_decoded():
    dispatcher = ResponseDispatcher()
    packet = Packet(protocol_id="openttds", data=build_server_info(name=b"Alpha"))

    entry = dispatcher.handle(packet, _entry(OpenTTDServerProtocol(), "openttds"))

    assert isinstance(entry, ServerEntry)
    assert entry.name == "Alpha"


def test_truncated_packet_is_malformed():
    dispatcher = ResponseDispatcher()
    packet = Packet(protocol_id="openttds", data=build_server_info()[:10])

    with pytest.raises(MalformedPacket):
        dispatcher.handle(packet, _entry(OpenTTDServerProtocol(), "openttds"))


@pytest.mark.parametrize(
    "exc",
    [IndexError("index out of range"), ValueError("bad value"), UnicodeDecodeError("ascii", b"\xff", 0, 1, "x")],
)
def test_unexpected_codec_errors_become_malformed(exc):
    dispatcher = ResponseDispatcher()

    with pytest.raises(MalformedPacket) as exc_info:
        dispatcher.handle(Packet(protocol_id="test", data=b"\x00"), _entry(ExplodingProtocol(exc)))

    assert exc_info.value.__cause__ is exc
    assert exc_info.value.kind == "malformed_packet"
    assert exc_info.value.details["error_type"] == type(exc).__name__


def test_packet_for_another_protocol_is_rejected():
    dispatcher = ResponseDispatcher()
    codec = ExplodingProtocol(AssertionError("codec must not run"))

    with pytest.raises(MalformedPacket, match="routed to codec for test") as exc_info:
        dispatcher.handle(Packet(protocol_id="openttds", data=build_server_info()), _entry(codec))

    assert exc_info.value.details == {"protocol": "openttds", "entry": "test"}
    assert exc_info.value.__cause__ is None


def test_master_result_must_be_a_list():
    dispatcher = ResponseDispatcher()

    with pytest.raises(MalformedPacket, match="returned ServerEntry"):
        dispatcher.handle(Packet(protocol_id="test", data=b"x"), _entry(WrongShapeMaster()))
