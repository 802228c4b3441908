"""Pytest fixtures for Twilight Clock tests."""

import datetime
import json
import sys
from pathlib import Path
from unittest.mock import MagicMock

import pytest

# Add parent to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from twilight_clock.location import LocationProvider  # noqa: E402

# New York City, daylight saving time (UTC-4)
NYC_LATITUDE = 40.7128
NYC_LONGITUDE = -74.0060
NYC_SUMMER_OFFSET = 4 * 3600


@pytest.fixture
def sample_config_dict(tmp_path):
    """Sample configuration dictionary."""
    return {
        "location": {
            "latitude": NYC_LATITUDE,
            "longitude": NYC_LONGITUDE,
            "utc_offset_seconds": NYC_SUMMER_OFFSET,
            "store_path": str(tmp_path / "location.json"),
        },
        "display": {
            "width": 480,
            "height": 320,
            "framebuffer": "/dev/fb1",
            "face_width": 144,
            "face_height": 168,
        },
        "http_server": {"enabled": True, "port": 8080, "bind_address": "127.0.0.1"},
        "appearance": {"clock_24h": True, "show_moon_phase": True},
    }


@pytest.fixture
def temp_config_file(tmp_path, sample_config_dict):
    """Create a temporary config file."""
    config_path = tmp_path / "config.json"
    with open(config_path, "w") as f:
        json.dump(sample_config_dict, f)
    return config_path


@pytest.fixture
def sample_config(sample_config_dict):
    """Create a Config object from sample data."""
    from twilight_clock.config import _dict_to_config

    return _dict_to_config(sample_config_dict)


@pytest.fixture
def location_store(tmp_path):
    """Path for a persisted location record."""
    return tmp_path / "state" / "location.json"


@pytest.fixture
def nyc_location_provider(location_store):
    """Location provider already holding New York in summer time."""
    provider = LocationProvider(location_store)
    provider.set(NYC_LATITUDE, NYC_LONGITUDE, NYC_SUMMER_OFFSET)
    return provider


@pytest.fixture
def empty_location_provider():
    """In-memory location provider with no location yet."""
    return LocationProvider()


@pytest.fixture
def recording_surface():
    """
    Render surface double recording every call in order.

    Calls are available from surface.mock_calls; fills in order from
    surface.fill_polygon.call_args_list.
    """
    surface = MagicMock()
    surface.fill_colors = []
    surface.set_fill_color.side_effect = surface.fill_colors.append
    return surface


@pytest.fixture
def summer_solstice_noon():
    """Local noon on the 2024 June solstice."""
    return datetime.datetime(2024, 6, 21, 12, 0)


@pytest.fixture
def mock_lunar():
    """Lunar provider returning a fixed first-quarter moon."""
    lunar = MagicMock()
    lunar.get_moon_phase.return_value = MagicMock(
        lunation=0.25,
        illumination=50.0,
        phase_name="First Quarter",
        phase_index=7,
    )
    return lunar
