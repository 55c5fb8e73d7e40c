"""
Tests for the OpenTTD server-info codec.

Tests cover:
- Version-gated fields across protocol revisions 1-5
- NewGRF summary formatting
- Password flag decoding
- Truncated payloads
"""
import pytest

from grokstat.exceptions import MalformedPacket, PacketUnderflowError
from grokstat.models import ServerEntry
from grokstat.protocols.openttds import OpenTTDServerProtocol, parse_server_info

from payloads import NEWGRF_A, NEWGRF_B, build_server_info

OPTIONAL_RULES = ("max-companies", "current-companies", "max-spectators")


def _decode(payload: bytes) -> ServerEntry:
    return OpenTTDServerProtocol().decode(payload, {})


@pytest.mark.parametrize("version", [1, 2, 3, 4, 5])
def test_optional_fields_present_only_from_version_2(version):
    entry = _decode(build_server_info(version=version, companies=(0, 0, 0)))

    for key in OPTIONAL_RULES:
        assert (key in entry.rules) == (version >= 2)
    if version >= 2:
        # zero was on the wire and must not read as "absent"
        assert entry.rules["max-companies"] == "0"


@pytest.mark.parametrize("version", [1, 2, 3, 4, 5])
def test_newgrf_summary_empty_below_version_4(version):
    entry = _decode(build_server_info(version=version, newgrfs=[NEWGRF_A]))

    if version >= 4:
        assert entry.rules["active-newgrfs-num"] == "1"
        assert entry.rules["active-newgrfs"] == f"ID:{NEWGRF_A[0].hex()}/MD5:{NEWGRF_A[1].hex()}"
    else:
        assert entry.rules["active-newgrfs-num"] == "0"
        assert entry.rules["active-newgrfs"] == ""


@pytest.mark.parametrize("version", [1, 2, 3, 4, 5])
def test_reserved_fields_skipped_only_below_version_3(version):
    info = parse_server_info(build_server_info(version=version))

    assert info.map_name == "Random Map"
    assert (info.map_width, info.map_height) == (256, 512)
    assert info.map_set == 1
    assert info.dedicated == 1


def test_time_fields_read_from_version_3():
    entry = _decode(build_server_info(version=3, time_current=730000, time_start=729000))

    assert entry.rules["time-current"] == "730000"
    assert entry.rules["time-start"] == "729000"


def test_time_fields_zero_below_version_3():
    entry = _decode(build_server_info(version=2))

    assert entry.rules["time-current"] == "0"
    assert entry.rules["time-start"] == "0"


def test_zero_newgrfs_gives_empty_summary():
    entry = _decode(build_server_info(version=4, newgrfs=[]))

    assert entry.rules["active-newgrfs-num"] == "0"
    assert entry.rules["active-newgrfs"] == ""


def test_multiple_newgrfs_joined_without_trailing_separator():
    entry = _decode(build_server_info(version=4, newgrfs=[NEWGRF_A, NEWGRF_B]))

    summary = entry.rules["active-newgrfs"]
    assert summary == (
        f"ID:{NEWGRF_A[0].hex()}/MD5:{NEWGRF_A[1].hex()}; "
        f"ID:{NEWGRF_B[0].hex()}/MD5:{NEWGRF_B[1].hex()}"
    )
    assert not summary.endswith(";")
    assert entry.rules["active-newgrfs-num"] == "2"


@pytest.mark.parametrize(
    "flag, expected",
    [(0x00, False), (0x01, True), (0x02, True), (0x7F, True), (0xFF, True)],
)
def test_password_flag(flag, expected):
    entry = _decode(build_server_info(need_pass=flag))

    assert entry.need_pass is expected
    assert entry.rules["need-pass"] == ("true" if expected else "false")


def test_text_fields_stop_at_terminator():
    entry = _decode(build_server_info(name=b"Test Server", server_version=b"1.10.3"))

    assert entry.name == "Test Server"
    assert entry.rules["server-name"] == "Test Server"
    assert entry.rules["server-version"] == "1.10.3"


def test_text_field_invalid_utf8_falls_back_to_latin1():
    entry = _decode(build_server_info(name=b"Caf\xe9"))

    assert entry.name == "Caf\xe9"


def test_version_2_end_to_end():
    payload = build_server_info(
        version=2,
        name=b"Alpha",
        max_clients=4,
        current_clients=2,
        need_pass=0x01,
        companies=(8, 2, 5),
    )

    entry = _decode(payload)

    assert entry.name == "Alpha"
    assert entry.max_clients == 4
    assert entry.num_clients == 2
    assert entry.need_pass is True
    assert entry.rules["max-companies"] == "8"
    assert entry.rules["current-companies"] == "2"
    assert entry.rules["max-spectators"] == "5"
    assert entry.players == []


def test_full_rule_set_for_version_4():
    entry = _decode(build_server_info(version=4, language_id=3, current_spectators=2))

    assert entry.rules == {
        "protocol-version": "4",
        "active-newgrfs-num": "0",
        "active-newgrfs": "",
        "time-current": "0",
        "time-start": "0",
        "max-companies": "15",
        "current-companies": "3",
        "max-spectators": "10",
        "server-name": "Test Server",
        "server-version": "14.1",
        "language-id": "3",
        "need-pass": "false",
        "max-clients": "25",
        "current-clients": "5",
        "current-spectators": "2",
        "map-name": "Random Map",
        "map-width": "256",
        "map-height": "512",
        "map-set": "1",
        "dedicated": "1",
    }
    assert entry.terrain == "Random Map"


@pytest.mark.parametrize("version", [1, 2, 3, 4])
def test_every_truncation_is_malformed(version):
    payload = build_server_info(version=version, newgrfs=[NEWGRF_A, NEWGRF_B])
    protocol = OpenTTDServerProtocol()

    for cut in range(len(payload)):
        with pytest.raises(MalformedPacket):
            protocol.decode(payload[:cut], {})


def test_short_read_reports_offset():
    with pytest.raises(PacketUnderflowError) as exc_info:
        parse_server_info(b"\x00\x00")

    assert exc_info.value.details["offset"] == 0
    assert exc_info.value.details["wanted"] == 3


def test_missing_text_terminator_is_malformed():
    payload = b"\x00\x00\x01" + b"\x01" + b"No terminator here"

    with pytest.raises(MalformedPacket):
        parse_server_info(payload)
