"""Current location, cached in memory and persisted to a JSON file."""

import json
import logging
import time
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Optional

logger = logging.getLogger(__name__)

# Layout version of the persisted location record
LOCATION_RECORD_VERSION = 1


@dataclass(frozen=True)
class Location:
    """
    A location fix with its timezone.

    utc_offset is the reverse of the usual timezone offset: it is the
    number of seconds added to local time to obtain UTC (18000 for UTC-5).
    """

    latitude: float
    longitude: float
    utc_offset: int
    last_update: float = 0.0  # epoch seconds the values last changed

    @property
    def tz_in_hours(self) -> float:
        """Local offset from UTC in hours (local = UTC + tz_in_hours)."""
        return -(self.utc_offset / 3600.0)

    def matches(self, latitude: float, longitude: float, utc_offset: int) -> bool:
        return (
            self.latitude == latitude
            and self.longitude == longitude
            and self.utc_offset == utc_offset
        )


class LocationProvider:
    """
    Supplies the location used for sun calculations.

    Values arrive from outside (config seed or the HTTP location endpoint)
    and are cached here. When a store path is given the latest values are
    also written to disk, so the face can draw immediately on restart.
    """

    def __init__(self, store_path: Optional[Path] = None):
        """
        Initialize location provider.

        Args:
            store_path: JSON file holding the persisted location, or None
                        to keep the location in memory only
        """
        self.store_path = store_path
        self._cache: Optional[Location] = None

    @property
    def available(self) -> bool:
        """True once a location has been set or loaded."""
        return self._cache is not None

    def get(self) -> Optional[Location]:
        """Get the current location, or None if none is known yet."""
        return self._cache

    @property
    def tz_in_hours(self) -> float:
        return self._cache.tz_in_hours if self._cache else 0.0

    def load(self) -> bool:
        """
        Read the persisted location into the cache.

        Returns:
            True if a usable location was loaded
        """
        self._cache = None
        if self.store_path is None or not self.store_path.exists():
            return False

        try:
            with open(self.store_path, "r") as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning(f"Could not read location from {self.store_path}: {e}")
            return False

        if not isinstance(data, dict) or data.get("version") != LOCATION_RECORD_VERSION:
            logger.warning(f"Ignoring location record with unknown layout in {self.store_path}")
            return False

        try:
            location = Location(
                latitude=float(data["latitude"]),
                longitude=float(data["longitude"]),
                utc_offset=int(data["utc_offset"]),
                last_update=float(data["last_update"]),
            )
        except (KeyError, TypeError, ValueError) as e:
            logger.warning(f"Incomplete location record in {self.store_path}: {e}")
            return False

        if location.last_update == 0:
            return False

        self._cache = location
        logger.info(
            f"Loaded location {location.latitude:.4f}, {location.longitude:.4f} "
            f"(UTC offset {location.utc_offset}s)"
        )
        return True

    def is_different(self, latitude: float, longitude: float, utc_offset: int) -> bool:
        """Check whether the given values differ from the current location."""
        return self._cache is None or not self._cache.matches(latitude, longitude, utc_offset)

    def set(self, latitude: float, longitude: float, utc_offset: int) -> bool:
        """
        Save a new location in the cache and, if configured, on disk.

        Setting the same values again leaves the stored timestamp untouched.

        Args:
            latitude: Degrees, positive north
            longitude: Degrees, positive east
            utc_offset: Seconds added to local time to obtain UTC

        Returns:
            True if the location is now current, False if the write failed
        """
        if not self.is_different(latitude, longitude, utc_offset):
            return True

        location = Location(
            latitude=latitude,
            longitude=longitude,
            utc_offset=utc_offset,
            last_update=time.time(),
        )

        if self.store_path is not None and not self._write(location):
            return False

        self._cache = location
        logger.info(
            f"Location set to {latitude:.4f}, {longitude:.4f} (UTC offset {utc_offset}s)"
        )
        return True

    def _write(self, location: Location) -> bool:
        record = {"version": LOCATION_RECORD_VERSION, **asdict(location)}
        tmp_path = self.store_path.with_suffix(self.store_path.suffix + ".tmp")
        try:
            self.store_path.parent.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w") as f:
                json.dump(record, f, indent=2)
            tmp_path.replace(self.store_path)
            return True
        except OSError as e:
            logger.error(f"Failed to write location to {self.store_path}: {e}")
            return False

    def erase(self) -> None:
        """Forget the current location, removing any persisted copy."""
        if self.store_path is not None:
            try:
                self.store_path.unlink(missing_ok=True)
            except OSError as e:
                logger.warning(f"Could not remove {self.store_path}: {e}")
        self._cache = None
