"""
Protocol Registry - binds configuration entries to protocol implementations

Built once at startup and read-only afterwards, so it can be shared by any
number of concurrent queries without locking.
"""
from dataclasses import dataclass
from types import MappingProxyType
from typing import Dict, Iterable, Iterator, List, Mapping, Optional, Type

import structlog

from grokstat.exceptions import ConfigurationError, UnknownProtocol
from grokstat.models import ProtocolConfig, ProtocolEntryInfo, TransportKind
from grokstat.protocols import PROTOCOLS, Protocol

logger = structlog.get_logger()


@dataclass(frozen=True)
class ProtocolEntry:
    """A protocol's full behavioral binding: implementation plus metadata."""

    id: str
    protocol: Protocol
    information: ProtocolEntryInfo

    @property
    def transport(self) -> TransportKind:
        return self.protocol.transport

    @property
    def is_master(self) -> bool:
        return self.protocol.is_master

    @property
    def default_port(self) -> str:
        return self.information.get("DefaultRequestPort", "")

    def build_request(self) -> bytes:
        return self.protocol.build_request(self.information)


class ProtocolRegistry:
    """Immutable lookup table of protocol id -> ProtocolEntry."""

    def __init__(self, entries: Mapping[str, ProtocolEntry]):
        self._entries: Mapping[str, ProtocolEntry] = MappingProxyType(dict(entries))

    @classmethod
    def build(
        cls,
        configs: Iterable[ProtocolConfig],
        implementations: Optional[Mapping[str, Type[Protocol]]] = None,
    ) -> "ProtocolRegistry":
        """
        Assemble the registry from configuration entries.

        Args:
            configs: Parsed ``[[Protocols]]`` entries
            implementations: Implementation name -> Protocol class
                             (defaults to every built-in protocol)

        Returns:
            ProtocolRegistry

        Raises:
            ConfigurationError: Duplicate id, unknown implementation or
                                transport mismatch
            TemplateError: A request template cannot be built
        """
        implementations = PROTOCOLS if implementations is None else implementations
        entries: Dict[str, ProtocolEntry] = {}

        for config in configs:
            if config.id in entries:
                raise ConfigurationError(
                    f"Protocol '{config.id}' is configured more than once",
                    details={"protocol": config.id},
                )

            implementation = config.implementation or config.id
            protocol_cls = implementations.get(implementation)
            if protocol_cls is None:
                raise ConfigurationError(
                    f"Protocol '{config.id}' refers to unknown implementation '{implementation}'",
                    details={"protocol": config.id, "implementation": implementation},
                )

            protocol = protocol_cls()
            if config.transport != protocol.transport:
                raise ConfigurationError(
                    f"Protocol '{config.id}' is configured for {config.transport.value} "
                    f"but '{implementation}' speaks {protocol.transport.value}",
                    details={"protocol": config.id},
                )

            entry = ProtocolEntry(
                id=config.id,
                protocol=protocol,
                information=MappingProxyType(config.information()),
            )
            # Surface template defects now rather than on the first query
            entry.build_request()
            entries[config.id] = entry

        logger.info("protocol_registry_built", protocols=sorted(entries))
        return cls(entries)

    def get(self, protocol_id: str) -> ProtocolEntry:
        try:
            return self._entries[protocol_id]
        except KeyError:
            raise UnknownProtocol(protocol_id)

    def infos(self) -> List[Dict[str, str]]:
        return [dict(entry.information) for entry in self._entries.values()]

    def __contains__(self, protocol_id: object) -> bool:
        return protocol_id in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)
