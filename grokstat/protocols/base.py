"""
Protocol capability interface

Every supported query protocol is one subclass of Protocol. The registry
binds an instance to its configuration entry; the query pipeline only ever
talks to this interface.
"""
from abc import ABC, abstractmethod
from typing import List, Union

from grokstat.engine.request_builder import build_request
from grokstat.models import ProtocolEntryInfo, ServerEntry, TransportKind

DecodeResult = Union[ServerEntry, List[str]]


class Protocol(ABC):
    """
    Abstract base class for all protocol implementations.

    Subclasses set ``transport`` and ``is_master`` and implement ``decode``.
    The default request comes from the ``RequestPreludeTemplate`` field of
    the protocol information.
    """

    name: str = ""
    transport: TransportKind = TransportKind.UDP
    is_master: bool = False
    template_field: str = "RequestPreludeTemplate"

    def build_request(self, info: ProtocolEntryInfo) -> bytes:
        """Build the request packet from the configured template."""
        return build_request(info.get(self.template_field, ""), info)

    @abstractmethod
    def decode(self, data: bytes, info: ProtocolEntryInfo) -> DecodeResult:
        """
        Decode a raw reply.

        Args:
            data: Reply bytes as returned by the transport
            info: Protocol information mapping

        Returns:
            ServerEntry, or a list of ``host:port`` strings for master protocols

        Raises:
            MalformedPacket: Reply does not match the protocol
        """
        pass

    def __repr__(self) -> str:
        return f"<{type(self).__name__} transport={self.transport.value} master={self.is_master}>"
