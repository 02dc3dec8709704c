"""
Configuration management for vaultfs.

Handles loading and saving user configuration from:
- XDG config directory: ~/.config/vaultfs/config.json
- Fallback: ~/.vaultfs/config.json
"""

import json
import logging
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass
class ProviderConfig:
    """Resource provider settings."""
    provider_root: Optional[str] = None
    filter_xml: Optional[str] = None
    stat_cache_ttl: float = 10.0
    content_cache_size: int = 1000


@dataclass
class CLIConfig:
    """CLI default options."""
    verbose: bool = False
    color: bool = True


@dataclass
class VaultFsConfig:
    """Main vaultfs configuration."""
    provider: ProviderConfig = field(default_factory=ProviderConfig)
    cli: CLIConfig = field(default_factory=CLIConfig)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary."""
        return {
            "provider": asdict(self.provider),
            "cli": asdict(self.cli),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'VaultFsConfig':
        """Create from dictionary."""
        return cls(
            provider=ProviderConfig(**data.get("provider", {})),
            cli=CLIConfig(**data.get("cli", {})),
        )


def get_config_path() -> Path:
    """
    Get configuration file path.

    Uses the XDG config location:
    1. ~/.config/vaultfs/config.json
    2. Fallback: ~/.vaultfs/config.json

    Returns:
        Path to config file
    """
    xdg_config_home = Path.home() / ".config"
    if xdg_config_home.exists():
        config_dir = xdg_config_home / "vaultfs"
    else:
        config_dir = Path.home() / ".vaultfs"

    return config_dir / "config.json"


def load_config() -> VaultFsConfig:
    """
    Load configuration from file.

    Returns:
        VaultFsConfig instance with loaded values or defaults
    """
    config_path = get_config_path()

    if not config_path.exists():
        return VaultFsConfig()

    try:
        with open(config_path, 'r') as f:
            data = json.load(f)
        return VaultFsConfig.from_dict(data)
    except (json.JSONDecodeError, OSError, TypeError) as e:
        logger.warning(f"Failed to load config from {config_path}: {e}. Using default configuration")
        return VaultFsConfig()


def save_config(config: VaultFsConfig) -> None:
    """
    Save configuration to file.

    Args:
        config: Configuration to save
    """
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)

    with open(config_path, 'w') as f:
        json.dump(config.to_dict(), f, indent=2)

    logger.info(f"Configuration saved to {config_path}")
