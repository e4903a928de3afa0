"""Configuration loading from YAML with built-in defaults"""
import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

CONFIG_ENV_VAR = 'HAPDEPLOY_CONFIG'
DEFAULT_CONFIG_FILENAME = 'hapdeploy.yaml'
CACHE_DIR_NAME = 'hapdeploy'


class ConfigError(Exception):
    """Raised when a config file exists but cannot be used."""
    pass


def default_cache_dir() -> Path:
    """Shared cache directory under the system temp dir."""
    return Path(tempfile.gettempdir()) / CACHE_DIR_NAME


@dataclass
class DeployConfig:
    """Settings for the CLI and the deployment pipeline.

    Attributes:
        bridge_tool: Bridge tool executable name or path
        cache_dir: Where downloads and extraction roots are kept
        download_timeout: HTTP timeout for artifact downloads (seconds)
        catalog_url: Build catalog server base URL (None = catalog disabled)
        download_config_name: Catalog config entry holding the download base URL
        progress_channel: Channel name used for JSON progress events
        source: File the settings were read from (None = defaults)
    """
    bridge_tool: str = 'hdc'
    cache_dir: Path = field(default_factory=default_cache_dir)
    download_timeout: float = 300.0
    catalog_url: Optional[str] = None
    download_config_name: str = 'harmony-hdc-server'
    progress_channel: str = 'deploy-progress'
    source: Optional[Path] = None


def find_config_file(explicit_path: Optional[str] = None) -> Optional[Path]:
    """Locate the config file.

    Precedence: explicit path, $HAPDEPLOY_CONFIG, ./hapdeploy.yaml.
    An explicit or environment path must exist; the local file is optional.
    """
    candidate = explicit_path or os.environ.get(CONFIG_ENV_VAR)
    if candidate:
        path = Path(candidate).expanduser()
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
        return path

    local = Path(DEFAULT_CONFIG_FILENAME)
    return local if local.is_file() else None


def _section(raw: Dict[str, Any], name: str) -> Dict[str, Any]:
    value = raw.get(name) or {}
    if not isinstance(value, dict):
        raise ConfigError(f"Config section '{name}' must be a mapping")
    return value


def parse_config(raw: Optional[Dict[str, Any]], source: Optional[Path] = None) -> DeployConfig:
    """Build a DeployConfig from parsed YAML, filling in defaults."""
    config = DeployConfig(source=source)
    if raw is None:
        return config
    if not isinstance(raw, dict):
        raise ConfigError(f"Config root must be a mapping, got {type(raw).__name__}")

    bridge = _section(raw, 'bridge')
    cache = _section(raw, 'cache')
    download = _section(raw, 'download')
    catalog = _section(raw, 'catalog')
    progress = _section(raw, 'progress')

    if bridge.get('tool'):
        config.bridge_tool = str(bridge['tool'])
    if cache.get('directory'):
        config.cache_dir = Path(str(cache['directory'])).expanduser()
    if download.get('timeout_seconds') is not None:
        try:
            config.download_timeout = float(download['timeout_seconds'])
        except (TypeError, ValueError) as e:
            raise ConfigError(f"download.timeout_seconds must be a number: {e}") from e
    if catalog.get('base_url'):
        config.catalog_url = str(catalog['base_url']).rstrip('/')
    if catalog.get('download_config_name'):
        config.download_config_name = str(catalog['download_config_name'])
    if progress.get('channel'):
        config.progress_channel = str(progress['channel'])

    return config


def load_config(explicit_path: Optional[str] = None) -> DeployConfig:
    """Load configuration (see find_config_file for lookup order).

    Raises:
        ConfigError: If the file is missing, unreadable or malformed
    """
    path = find_config_file(explicit_path)
    if path is None:
        return DeployConfig()

    try:
        with open(path, 'r', encoding='utf-8') as f:
            raw = yaml.safe_load(f)
    except OSError as e:
        raise ConfigError(f"Could not read config file {path}: {e}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    return parse_config(raw, source=path)
