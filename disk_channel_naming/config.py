"""Configuration management for the layout generator"""

import os
import logging
from dataclasses import dataclass
from typing import Any, Dict, Optional, Tuple
import yaml

from .channels import DEFAULT_CHANNELS, check_unique
from .errors import ConfigError
from .models import TopologyMode
from .namespace import BY_ID_DIR, BY_PATH_DIR

DEFAULT_CONFIG_FILE = "/etc/zfs/zpool_layout.conf"
DEFAULT_OUTPUT = "/etc/zfs/zdev.conf"
DEFAULT_LABEL_PREFIX = "scsi-"


def _as_list(value: Any) -> Tuple[str, ...]:
    """Accept a YAML sequence or a whitespace separated string"""
    if value is None:
        return ()
    if isinstance(value, str):
        return tuple(value.split())
    if isinstance(value, (list, tuple)):
        return tuple(str(v) for v in value)
    return (str(value),)


def _as_id_list(value: Any, key: str) -> Tuple[str, ...]:
    """Bus or port identifiers, which must be strings to keep leading zeros

    Raises:
        ConfigError: If YAML parsed an identifier as a number
    """
    items = value if isinstance(value, (list, tuple)) else [value]
    for item in items:
        if item is not None and not isinstance(item, str):
            raise ConfigError(
                f"{key} must be quoted strings (e.g. [\"01\", \"02\"]), got {value!r}"
            )
    return _as_list(value)


def _setting(data: dict, key: str, default: Any) -> Any:
    """Value for key, or default when the key is missing or left empty"""
    value = data.get(key)
    return default if value is None else value


@dataclass(frozen=True)
class LayoutConfig:
    """Settings for one run of the layout generator"""

    mode: TopologyMode = TopologyMode.DIRECT
    buses: Tuple[str, ...] = ()              # Bus identifiers (direct mode)
    ports: Tuple[str, ...] = ()              # Host port identifiers (direct mode)
    switch_ports: Tuple[int, ...] = ()       # SAS switch ports (switch mode)
    channels: Tuple[str, ...] = DEFAULT_CHANNELS
    slot_map: Optional[str] = None           # Slot mapping file, None for identity
    label_prefix: str = DEFAULT_LABEL_PREFIX
    output: str = DEFAULT_OUTPUT
    by_path_dir: str = BY_PATH_DIR
    by_id_dir: str = BY_ID_DIR
    trigger: bool = False

    def validate(self) -> "LayoutConfig":
        """Check the settings needed for the selected mode

        Raises:
            ConfigError: If required lists are empty or hold repeated values
        """
        if not self.channels:
            raise ConfigError("No channel labels configured")

        if self.mode is TopologyMode.DIRECT:
            if not self.buses:
                raise ConfigError("Direct mode needs at least one bus")
            if not self.ports:
                raise ConfigError("Direct mode needs at least one host port")
        elif not self.switch_ports:
            raise ConfigError("Switch mode needs at least one switch port")

        check_unique("Channel labels", self.channels)
        check_unique("Buses", self.buses)
        check_unique("Ports", self.ports)
        check_unique("Switch ports", self.switch_ports)

        return self

    @property
    def namespace_dir(self) -> str:
        """Directory scanned for device links in the selected mode"""
        if self.mode is TopologyMode.SWITCH:
            return self.by_id_dir
        return self.by_path_dir

    def to_dict(self) -> dict:
        """Convert config to dictionary representation"""
        return {
            "mode": self.mode.value,
            "buses": list(self.buses),
            "ports": list(self.ports),
            "switch_ports": list(self.switch_ports),
            "channels": list(self.channels),
            "slot_map": self.slot_map,
            "label_prefix": self.label_prefix,
            "output": self.output,
            "by_path_dir": self.by_path_dir,
            "by_id_dir": self.by_id_dir,
            "trigger": self.trigger
        }

    @classmethod
    def from_dict(cls, data: dict) -> "LayoutConfig":
        """Create LayoutConfig from dictionary, using defaults for missing keys

        Raises:
            ConfigError: If a value has the wrong form
        """
        defaults = cls()
        try:
            mode = TopologyMode(_setting(data, "mode", defaults.mode.value))
        except ValueError:
            raise ConfigError(f"Unknown topology mode: {data.get('mode')!r}")

        try:
            switch_ports = tuple(int(p) for p in _as_list(data.get("switch_ports")))
        except ValueError:
            raise ConfigError(f"Switch ports must be integers: {data.get('switch_ports')!r}")

        channels = _as_list(data.get("channels")) or defaults.channels

        return cls(
            mode=mode,
            buses=_as_id_list(data.get("buses"), "buses"),
            ports=_as_id_list(data.get("ports"), "ports"),
            switch_ports=switch_ports,
            channels=channels,
            slot_map=_setting(data, "slot_map", defaults.slot_map),
            label_prefix=_setting(data, "label_prefix", defaults.label_prefix),
            output=_setting(data, "output", defaults.output),
            by_path_dir=_setting(data, "by_path_dir", defaults.by_path_dir),
            by_id_dir=_setting(data, "by_id_dir", defaults.by_id_dir),
            trigger=bool(_setting(data, "trigger", defaults.trigger))
        )


class ConfigManager:
    """Loads layout settings from a YAML file and applies overrides"""

    def __init__(self, config_file: str = DEFAULT_CONFIG_FILE, logger: Optional[logging.Logger] = None):
        """Initialize configuration manager

        Args:
            config_file: Path to configuration file
            logger: Logger instance
        """
        self.config_file = os.path.expanduser(config_file)
        self.logger = logger or logging.getLogger(__name__)
        self.data: Dict[str, Any] = {}

        self.load()

    def load(self) -> None:
        """Load configuration from YAML file

        Configuration file structure:
        ```yaml
        mode: direct              # direct or switch
        buses: ["01", "02", "03"] # Bus numbers, enumerated first to last
        ports: ["4", "0"]         # Host ports, enumerated within each bus
        switch_ports: [0, 1, 2]   # SAS switch ports (switch mode)
        channels: A B C D E F     # Channel labels
        slot_map: /etc/zfs/slot.map
        label_prefix: "scsi-"
        output: /etc/zfs/zdev.conf
        trigger: false
        ```

        Bus and port numbers must be quoted so leading zeros survive.

        Raises:
            ConfigError: If the file exists but is not valid YAML
        """
        if not os.path.exists(self.config_file):
            self.logger.warning(f"Configuration file {self.config_file} not found. Using default settings.")
            return

        self.logger.info(f"Loading configuration from {self.config_file}")
        try:
            with open(self.config_file, 'r') as f:
                config = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigError(f"Error parsing YAML in configuration file {self.config_file}: {e}")
        except IOError as e:
            raise ConfigError(f"Error reading configuration file {self.config_file}: {e}")

        if not config:
            self.logger.warning(f"Configuration file {self.config_file} is empty")
            return
        if not isinstance(config, dict):
            raise ConfigError(f"Configuration file {self.config_file} must contain a mapping")

        self.data = config
        self.logger.debug(f"Loaded configuration keys: {sorted(config)}")

    def build(self, overrides: Optional[Dict[str, Any]] = None) -> LayoutConfig:
        """Merge file settings with overrides and validate the result

        Args:
            overrides: Values taking precedence over the file; None values are ignored

        Returns:
            Validated LayoutConfig
        """
        merged = dict(self.data)
        for key, value in (overrides or {}).items():
            if value is not None:
                merged[key] = value

        return LayoutConfig.from_dict(merged).validate()

