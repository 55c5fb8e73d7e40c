"""
Protocol configuration loader

Reads ``[[Protocols]]`` tables from the packaged default configuration or
a custom TOML file and turns them into a ProtocolRegistry.
"""
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import structlog
import tomlkit
from pydantic import ValidationError
from tomlkit.exceptions import TOMLKitError

from grokstat.config import settings
from grokstat.engine.registry import ProtocolRegistry
from grokstat.exceptions import ConfigurationError
from grokstat.models import ProtocolConfig

logger = structlog.get_logger()


def parse_protocol_configs(text: str, source: str = "<string>") -> List[ProtocolConfig]:
    """
    Parse TOML text into protocol configuration entries.

    Args:
        text: TOML document
        source: Where the text came from, for error messages

    Returns:
        List of ProtocolConfig in file order

    Raises:
        ConfigurationError: Invalid TOML or invalid protocol entry
    """
    try:
        document: Dict[str, Any] = tomlkit.parse(text).unwrap()
    except TOMLKitError as exc:
        raise ConfigurationError(f"Error loading config file {source}: {exc}") from exc

    tables = document.get("Protocols", [])
    if not isinstance(tables, list):
        raise ConfigurationError(f"{source}: 'Protocols' must be an array of tables")

    configs = []
    for index, table in enumerate(tables):
        try:
            configs.append(ProtocolConfig.model_validate(table))
        except ValidationError as exc:
            raise ConfigurationError(
                f"{source}: invalid protocol entry #{index + 1}: {exc}",
                details={"index": index},
            ) from exc
    return configs


def load_protocol_configs(path: Optional[Union[str, Path]] = None) -> List[ProtocolConfig]:
    """Load protocol entries from ``path``, the configured custom file, or the packaged default."""
    if path:
        config_path = Path(path)
    elif settings.protocols_config_path:
        config_path = settings.protocols_config_path
    else:
        config_path = settings.default_protocols_config

    try:
        text = config_path.read_text(encoding="utf-8")
    except OSError as exc:
        if config_path == settings.default_protocols_config:
            raise ConfigurationError("Default config file not found.") from exc
        raise ConfigurationError("Error loading custom config file.", details={"path": str(config_path)}) from exc

    configs = parse_protocol_configs(text, source=str(config_path))
    logger.debug("protocol_config_loaded", path=str(config_path), count=len(configs))
    return configs


def load_registry(path: Optional[Union[str, Path]] = None) -> ProtocolRegistry:
    """Load configuration and build the registry in one step."""
    return ProtocolRegistry.build(load_protocol_configs(path))
