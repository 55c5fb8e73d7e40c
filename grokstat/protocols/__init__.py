"""
Protocol implementations

Each module defines one Protocol subclass. PROTOCOLS maps the
implementation name a configuration entry refers to onto its class; adding
a protocol means adding a module and one line here.
"""
from typing import Dict, Type

from grokstat.protocols.base import DecodeResult, Protocol
from grokstat.protocols.openttdm import OpenTTDMasterProtocol
from grokstat.protocols.openttds import OpenTTDServerProtocol
from grokstat.protocols.textmaster import TextMasterProtocol

PROTOCOLS: Dict[str, Type[Protocol]] = {
    cls.name: cls
    for cls in (OpenTTDServerProtocol, OpenTTDMasterProtocol, TextMasterProtocol)
}

__all__ = ["DecodeResult", "PROTOCOLS", "Protocol"]
