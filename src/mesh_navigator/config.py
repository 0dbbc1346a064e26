"""Configuration handling for the Meshtastic Navigator."""

from dataclasses import dataclass, field
from pathlib import Path
import yaml

from .core.controls import DEFAULT_SYMBOLS


@dataclass
class Config:
    """Configuration settings for the navigator.

    Attributes:
        root_directory: Directory containing browsable documents.
        page_budget: Soft character budget per navigation page.
        max_message_size: Maximum characters per radio message.
        ack_timeout_seconds: Seconds to wait for each message ACK.
        timeout_seconds: Inactivity timeout of a navigation session.
        debounce_seconds: Window for dropping repeated controls (0 = off).
        controls: Action name -> control symbol.
        connection_type: Meshtastic connection type (serial, ble, tcp).
        device: Device path, BLE address, or hostname.
    """

    root_directory: str = "~/mesh-content"
    page_budget: int = 200
    max_message_size: int = 230
    ack_timeout_seconds: float = 30.0
    timeout_seconds: float = 300.0
    debounce_seconds: float = 0.0
    controls: dict[str, str] = field(default_factory=lambda: dict(DEFAULT_SYMBOLS))
    connection_type: str = "serial"
    device: str | None = None

    def get_root_path(self) -> Path:
        """Get root directory as expanded Path object."""
        return Path(self.root_directory).expanduser()


def load_config(path: str | Path) -> Config:
    """
    Load configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        Config object with loaded values.

    Raises:
        FileNotFoundError: If config file doesn't exist.
    """
    config_path = Path(path)

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")

    with open(config_path) as f:
        data = yaml.safe_load(f) or {}

    # Extract sections
    navigator = data.get("navigator") or {}
    navigation = data.get("navigation") or {}
    meshtastic = data.get("meshtastic") or {}

    controls = dict(DEFAULT_SYMBOLS)
    controls.update({action: str(symbol) for action, symbol in (navigation.get("controls") or {}).items()})

    return Config(
        root_directory=navigator.get("root_directory", Config.root_directory),
        page_budget=navigator.get("page_budget", Config.page_budget),
        max_message_size=navigator.get("max_message_size", Config.max_message_size),
        ack_timeout_seconds=navigator.get("ack_timeout_seconds", Config.ack_timeout_seconds),
        timeout_seconds=navigation.get("timeout_seconds", Config.timeout_seconds),
        debounce_seconds=navigation.get("debounce_seconds", Config.debounce_seconds),
        controls=controls,
        connection_type=meshtastic.get("connection_type", Config.connection_type),
        device=meshtastic.get("device", Config.device),
    )
