"""
Core configuration management
"""
from pathlib import Path
from typing import Optional
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """grokstat settings"""

    # API settings
    api_host: str = "0.0.0.0"
    api_port: int = 8000

    # Paths
    project_root: Path = Path(__file__).parent.parent
    default_protocols_config: Path = Path(__file__).parent / "data" / "grokstat.toml"
    protocols_config_path: Optional[Path] = None  # custom TOML overriding the packaged one
    log_dir: Path = project_root / "logs"

    # Querying
    query_timeout_sec: float = 5.0
    max_response_bytes: int = 16777215

    # Logging
    log_level: str = "WARNING"
    log_to_file: bool = False

    class Config:
        env_prefix = "GROKSTAT_"
        env_file = ".env"


settings = Settings()
