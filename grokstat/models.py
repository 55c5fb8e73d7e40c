"""
Core data models
"""
from enum import Enum
from typing import Any, Dict, List, Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Protocol metadata: display name, template sources, byte literals, default port.
ProtocolEntryInfo = Mapping[str, str]


class TransportKind(str, Enum):
    """Transport a protocol is spoken over"""

    UDP = "udp"
    TCP = "tcp"


class PlayerEntry(BaseModel):
    """Per-player fields reported by protocols that enumerate players"""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    score: int = 0
    ping: int = 0


class ServerEntry(BaseModel):
    """Normalized information about a single game server"""

    model_config = ConfigDict(frozen=True)

    name: str = ""
    max_clients: int = 0
    num_clients: int = 0
    need_pass: bool = False
    terrain: str = ""
    rules: Dict[str, str] = Field(default_factory=dict)
    players: List[PlayerEntry] = Field(default_factory=list)


class ProtocolConfig(BaseModel):
    """One ``[[Protocols]]`` table from the protocol configuration file.

    Keys besides the named ones are kept as extra string fields and end up
    in the protocol's information mapping, where request templates can
    reference them.
    """

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    id: str = Field(alias="Id")
    name: str = Field(alias="Name")
    transport: TransportKind = Field(alias="Transport")
    default_request_port: str = Field(alias="DefaultRequestPort")
    implementation: Optional[str] = Field(default=None, alias="Implementation")

    @field_validator("transport", mode="before")
    @classmethod
    def _transport_lowercase(cls, value: Any) -> Any:
        return value.lower() if isinstance(value, str) else value

    @field_validator("default_request_port", mode="before")
    @classmethod
    def _port_as_text(cls, value: Any) -> str:
        return str(value)

    def information(self) -> Dict[str, str]:
        """Flatten into the ordered metadata mapping used by builders and codecs."""
        info = {
            "Id": self.id,
            "Name": self.name,
            "Transport": self.transport.value,
            "DefaultRequestPort": self.default_request_port,
        }
        for key, value in (self.model_extra or {}).items():
            info[key] = str(value)
        return info


class QueryResult(BaseModel):
    """Outcome of one query: server info, or a server list for master protocols"""

    protocol: str
    host: str
    server_info: Optional[ServerEntry] = None
    servers: Optional[List[str]] = None


class QueryRequest(BaseModel):
    """Single-host query request accepted by the HTTP API"""

    protocol: str
    host: str


class CliRequest(BaseModel):
    """JSON document read from stdin by the command line front end"""

    model_config = ConfigDict(populate_by_name=True)

    hosts: List[str] = Field(default_factory=list)
    protocol: str = ""
    show_protocols: bool = Field(default=False, alias="show-protocols")
    custom_config_path: str = Field(default="", alias="custom-config-path")


class JsonResponse(BaseModel):
    """Envelope every front end answers with"""

    version: str
    status: int
    message: str
    output: Any = Field(default_factory=dict)
    kind: Optional[str] = None
