import pytest

from grokstat.engine.request_builder import build_request, decode_escapes, expand_template
from grokstat.exceptions import ConfigurationError, TemplateError

OPENTTDS_INFO = {
    "Name": "OpenTTD Server",
    "PreludeStarter": "",
    "PreludeFinisher": "\\x00\\x00",
    "RequestPreludeTemplate": "{{.PreludeStarter}}\\x03{{.PreludeFinisher}}",
    "DefaultRequestPort": "3979",
}


def test_openttd_find_server_request():
    packet = build_request(OPENTTDS_INFO["RequestPreludeTemplate"], OPENTTDS_INFO)

    assert packet == b"\x03\x00\x00"


def test_placeholders_substituted_textually():
    text = expand_template("{{.Name}}:{{ .DefaultRequestPort }}", OPENTTDS_INFO)

    assert text == "OpenTTD Server:3979"


def test_binary_escapes_decoded():
    assert decode_escapes("\\xff\\xff\\xff\\xffgetstatus\\n") == b"\xff\xff\xff\xffgetstatus\n"


def test_template_without_placeholders():
    assert build_request("\\x01ping", {}) == b"\x01ping"


def test_unresolved_placeholder_raises_template_error():
    with pytest.raises(TemplateError) as exc_info:
        build_request("{{.Missing}}\\x00", OPENTTDS_INFO)

    assert exc_info.value.details["field"] == "Missing"
    assert exc_info.value.kind == "template_error"
    assert isinstance(exc_info.value, ConfigurationError)


def test_non_latin1_template_rejected():
    with pytest.raises(TemplateError):
        build_request("€", {})


def test_truncated_escape_rejected():
    with pytest.raises(TemplateError):
        build_request("\\x0", {})
