"""Configuration loading and validation for Twilight Clock."""

import dataclasses
import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# Default paths to search for config
CONFIG_PATHS = [
    Path("config.json"),
    Path.home() / ".config" / "twilight-clock" / "config.json",
    Path("/etc/twilight-clock/config.json"),
]

DEFAULT_LOCATION_STORE = Path.home() / ".local" / "share" / "twilight-clock" / "location.json"

# Widest real-world timezone offsets are UTC-12 and UTC+14
MAX_UTC_OFFSET_SECONDS = 14 * 3600


def validate_coordinates(latitude: float, longitude: float, utc_offset: int) -> list[str]:
    """Return list of errors for a location triple, empty if valid."""
    errors = []
    if not -90 <= latitude <= 90:
        errors.append(f"Invalid latitude {latitude}: must be -90 to 90")
    if not -180 <= longitude <= 180:
        errors.append(f"Invalid longitude {longitude}: must be -180 to 180")
    if not -MAX_UTC_OFFSET_SECONDS <= utc_offset <= MAX_UTC_OFFSET_SECONDS:
        errors.append(
            f"Invalid UTC offset {utc_offset}: must be within "
            f"+/-{MAX_UTC_OFFSET_SECONDS} seconds"
        )
    return errors


@dataclass
class LocationConfig:
    """
    Location settings.

    The coordinates only seed the location store; a location received
    over HTTP replaces them and is what survives a restart.
    """

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    utc_offset_seconds: Optional[int] = None
    store_path: str = str(DEFAULT_LOCATION_STORE)

    @property
    def has_seed(self) -> bool:
        return None not in (self.latitude, self.longitude, self.utc_offset_seconds)

    def validate(self) -> list[str]:
        """Return list of validation errors, empty if valid."""
        seed = (self.latitude, self.longitude, self.utc_offset_seconds)
        if all(value is None for value in seed):
            return []
        if not self.has_seed:
            return ["latitude, longitude and utc_offset_seconds must be set together"]
        return validate_coordinates(self.latitude, self.longitude, self.utc_offset_seconds)


@dataclass
class DisplayConfig:
    """Display settings."""

    width: int = 480
    height: int = 320
    framebuffer: str = "/dev/fb1"
    face_width: int = 144
    face_height: int = 168

    def validate(self) -> list[str]:
        errors = []
        if self.width <= 0 or self.height <= 0:
            errors.append(f"Invalid display dimensions: {self.width}x{self.height}")
        if self.face_width <= 0 or self.face_height <= 0:
            errors.append(f"Invalid face dimensions: {self.face_width}x{self.face_height}")
        return errors


@dataclass
class HttpServerConfig:
    """HTTP location and screenshot server settings."""

    enabled: bool = True
    port: int = 8080
    bind_address: str = "127.0.0.1"  # Secure default: localhost only
    rate_limit_per_second: int = 10

    def validate(self) -> list[str]:
        errors = []
        if not 1 <= self.port <= 65535:
            errors.append(f"Invalid port {self.port}: must be 1-65535")
        if self.rate_limit_per_second <= 0:
            errors.append("Rate limit must be positive")
        return errors


@dataclass
class AppearanceConfig:
    """Appearance settings."""

    clock_24h: bool = True
    show_moon_phase: bool = True

    def validate(self) -> list[str]:
        return []


@dataclass
class Config:
    """Main configuration container."""

    location: LocationConfig = field(default_factory=LocationConfig)
    display: DisplayConfig = field(default_factory=DisplayConfig)
    http_server: HttpServerConfig = field(default_factory=HttpServerConfig)
    appearance: AppearanceConfig = field(default_factory=AppearanceConfig)

    def validate(self) -> list[str]:
        """Validate all configuration sections. Returns list of errors."""
        errors = []
        errors.extend(self.location.validate())
        errors.extend(self.display.validate())
        errors.extend(self.http_server.validate())
        errors.extend(self.appearance.validate())
        return errors


def _dataclass_from_dict(cls, data: dict):
    """Create a dataclass instance from a dict, using field defaults for missing keys."""
    kwargs = {}
    for f in dataclasses.fields(cls):
        if f.name in data:
            kwargs[f.name] = data[f.name]
        elif f.default is not dataclasses.MISSING:
            kwargs[f.name] = f.default
        elif f.default_factory is not dataclasses.MISSING:
            kwargs[f.name] = f.default_factory()
    return cls(**kwargs)


# Mapping from config JSON keys to their dataclass types
_CONFIG_SECTIONS = {
    "location": ("location", LocationConfig),
    "display": ("display", DisplayConfig),
    "http_server": ("http_server", HttpServerConfig),
    "appearance": ("appearance", AppearanceConfig),
}


def _dict_to_config(data: dict) -> Config:
    """Convert a dictionary to a Config object."""
    config = Config()
    for key, (attr, cls) in _CONFIG_SECTIONS.items():
        if key in data:
            setattr(config, attr, _dataclass_from_dict(cls, data[key]))
    return config


def load_config(config_path: Optional[Path] = None) -> Config:
    """
    Load configuration from JSON file.

    Args:
        config_path: Explicit path to config file. If None, searches default paths.

    Returns:
        Config object with loaded settings.

    Raises:
        FileNotFoundError: If no config file found and config_path was explicit.
        ValueError: If config file has validation errors.
    """
    if config_path is not None:
        paths_to_try = [config_path]
    else:
        paths_to_try = CONFIG_PATHS

    found_path = None
    for path in paths_to_try:
        if path.exists():
            found_path = path
            break

    if found_path is None:
        if config_path is not None:
            raise FileNotFoundError(f"Config file not found: {config_path}")
        logger.warning("No config file found, using defaults")
        return Config()

    logger.info(f"Loading config from {found_path}")
    try:
        with open(found_path, "r") as f:
            data = json.load(f)
    except json.JSONDecodeError as e:
        raise ValueError(f"Invalid JSON in config file {found_path}: {e}")

    config = _dict_to_config(data)

    errors = config.validate()
    if errors:
        error_msg = "Config validation errors:\n" + "\n".join(
            f"  - {e}" for e in errors
        )
        raise ValueError(error_msg)

    return config
