"""
Custom Exception Hierarchy for grokstat

Provides structured exceptions for every failure a query can hit.
All custom exceptions inherit from GrokstatError and carry a stable
``kind`` string so callers can branch on the failure without parsing text.
"""
from typing import Optional


class GrokstatError(Exception):
    """
    Base exception for all grokstat-specific errors.

    All custom exceptions should inherit from this class to allow
    catching all query errors with a single except clause.
    """
    kind = "error"

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}


# Configuration Errors

class ConfigurationError(GrokstatError):
    """
    Invalid configuration or settings.

    Raised when the protocol configuration file is missing, unreadable,
    or binds a protocol id to something that does not exist.
    """
    kind = "configuration_error"


class TemplateError(ConfigurationError):
    """Request template references a field the protocol info does not define."""
    kind = "template_error"


class UnknownProtocol(GrokstatError):
    """Requested protocol id is not in the registry."""
    kind = "unknown_protocol"

    def __init__(self, protocol_id: str):
        super().__init__(f"Invalid protocol specified: {protocol_id}", {"protocol": protocol_id})
        self.protocol_id = protocol_id


class InvalidAddressError(GrokstatError):
    """Host string cannot be turned into a host and port."""
    kind = "invalid_address"


# Network and Transport Errors

class TransportError(GrokstatError):
    """
    Network transport failures.

    Base class for all network communication errors.
    Distinguishes network issues from undecodable replies.
    """
    kind = "transport_error"


class ConnectError(TransportError):
    """Failed to establish the socket to the server."""


class SendError(TransportError):
    """Failed to send the request."""


class ReceiveError(TransportError):
    """Failed to receive the reply."""


class QueryTimeoutError(TransportError):
    """Deadline elapsed before the server replied."""
    kind = "timeout"


class EmptyResponse(GrokstatError):
    """Server replied, but nothing was left after trimming padding."""
    kind = "empty_response"


# Protocol and Decoding Errors

class ProtocolError(GrokstatError):
    """
    Protocol-related errors while decoding a reply.

    Base class for all codec errors.
    """
    kind = "protocol_error"


class MalformedPacket(ProtocolError):
    """Reply could not be decoded according to the protocol."""
    kind = "malformed_packet"


class PacketUnderflowError(MalformedPacket):
    """A read ran past the end of the packet."""

    def __init__(self, wanted: int, offset: int, available: int):
        super().__init__(
            f"Malformed packet: need {wanted} byte(s) at offset {offset}, have {available}",
            {"wanted": wanted, "offset": offset, "available": available},
        )
