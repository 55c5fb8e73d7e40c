"""
Request Builder - expands a protocol's request template into wire bytes

Templates are the strings carried by the protocol configuration, e.g.
``{{.PreludeStarter}}\\x03{{.PreludeFinisher}}``. Placeholders are replaced
with the matching information fields, then backslash escapes are decoded so
binary control bytes can live inside otherwise textual templates.
"""
import re

import structlog

from grokstat.exceptions import TemplateError
from grokstat.models import ProtocolEntryInfo

logger = structlog.get_logger()

PLACEHOLDER_PATTERN = re.compile(r"\{\{\s*\.(\w+)\s*\}\}")


def expand_template(template: str, info: ProtocolEntryInfo) -> str:
    """Substitute ``{{.Field}}`` placeholders with values from ``info``."""

    def _substitute(match: "re.Match[str]") -> str:
        field_name = match.group(1)
        if field_name not in info:
            raise TemplateError(
                f"Request template references undefined field '{field_name}'",
                details={"field": field_name, "template": template},
            )
        return info[field_name]

    return PLACEHOLDER_PATTERN.sub(_substitute, template)


def decode_escapes(text: str) -> bytes:
    """Turn ``\\x00``-style escapes into the bytes they name."""
    try:
        return text.encode("latin-1").decode("unicode_escape").encode("latin-1")
    except UnicodeError as exc:
        raise TemplateError(
            f"Request template cannot be encoded as bytes: {exc}",
            details={"text": text},
        ) from exc


def build_request(template: str, info: ProtocolEntryInfo) -> bytes:
    """
    Build the exact byte sequence to transmit.

    Args:
        template: Template source, usually ``info["RequestPreludeTemplate"]``
        info: Protocol information mapping

    Returns:
        Request bytes

    Raises:
        TemplateError: Unresolved placeholder or undecodable escape
    """
    packet = decode_escapes(expand_template(template, info))
    logger.debug("request_built", protocol=info.get("Id"), size=len(packet))
    return packet
