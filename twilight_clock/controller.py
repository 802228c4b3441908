"""Watchface controller: owns the twilight bands and keeps them current."""

import datetime
import logging
from contextlib import ExitStack
from dataclasses import dataclass
from typing import Optional

from .data.ephemeris import (
    RiseSetTime,
    ZENITH_ASTRONOMICAL,
    ZENITH_CIVIL,
    ZENITH_NAUTICAL,
    ZENITH_OFFICIAL,
)
from .data.lunar import LunarProvider, MoonPhase
from .location import LocationProvider
from .views.colors import BLACK, WHITE
from .views.surface import Rect, RenderSurface
from .views.tones import OverlaySource, Tone
from .views.twilight import EnclosureSide, FaceGeometry, TwilightBand

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class BandDef:
    """Static description of one twilight band."""

    name: str
    zenith: float
    enclose: EnclosureSide
    overlay: Optional[OverlaySource]
    fill_color: int


# Render order, darkest first. Each band is named for the region below its
# boundary, so its zenith is the next deeper grade of twilight.
BAND_LAYOUT = (
    BandDef("night", ZENITH_ASTRONOMICAL, EnclosureSide.BOTTOM, None, BLACK),
    BandDef("astro", ZENITH_NAUTICAL, EnclosureSide.TOP, Tone.DARK_GRAY, WHITE),
    BandDef("nautical", ZENITH_CIVIL, EnclosureSide.TOP, Tone.GRAY, WHITE),
    BandDef("civil", ZENITH_OFFICIAL, EnclosureSide.TOP, Tone.LIGHT_GRAY, WHITE),
)


class WatchfaceController:
    """
    Owns the four twilight bands plus the location and day they reflect.

    Recomputation happens at most once per local day unless forced by a
    location change; rendering can happen as often as the display wants.
    """

    def __init__(
        self,
        bands: dict[str, TwilightBand],
        location_provider: LocationProvider,
        lunar: Optional[LunarProvider] = None,
        layout: tuple[BandDef, ...] = BAND_LAYOUT,
    ):
        self.bands = bands
        self.location_provider = location_provider
        self.lunar = lunar
        self.layout = layout
        self.last_update_day: Optional[int] = None
        self.moon_phase: Optional[MoonPhase] = None

    @classmethod
    def create(
        cls,
        location_provider: LocationProvider,
        geometry: FaceGeometry = FaceGeometry(),
        lunar: Optional[LunarProvider] = None,
        layout: tuple[BandDef, ...] = BAND_LAYOUT,
    ) -> Optional["WatchfaceController"]:
        """
        Create a controller with all of its bands.

        Returns:
            WatchfaceController, or None if any band could not be created.
            Bands built before the failure are released.
        """
        with ExitStack() as stack:
            bands = {}
            for band_def in layout:
                band = TwilightBand.create(
                    band_def.zenith, band_def.enclose, band_def.overlay, geometry
                )
                if band is None:
                    logger.error(f"Failed to create '{band_def.name}' twilight band")
                    return None
                stack.enter_context(band)
                bands[band_def.name] = band
            stack.pop_all()

        return cls(bands, location_provider, lunar, layout)

    @property
    def sunrise_time(self) -> RiseSetTime:
        """Local sunrise (official zenith), or NO_RISE_SET_TIME."""
        return self.bands["civil"].dawn_time

    @property
    def sunset_time(self) -> RiseSetTime:
        """Local sunset (official zenith), or NO_RISE_SET_TIME."""
        return self.bands["civil"].dusk_time

    def local_now(self, utc_now: Optional[datetime.datetime] = None) -> datetime.datetime:
        """
        Current local time from the location's UTC offset.

        Falls back to the system clock when no location is known yet.

        Args:
            utc_now: Aware UTC datetime (default: now)

        Returns:
            Naive local datetime
        """
        if utc_now is None:
            utc_now = datetime.datetime.now(datetime.timezone.utc)

        location = self.location_provider.get()
        if location is None:
            return utc_now.astimezone().replace(tzinfo=None)

        local = utc_now - datetime.timedelta(seconds=location.utc_offset)
        return local.replace(tzinfo=None)

    def update_location(
        self,
        latitude: float,
        longitude: float,
        utc_offset: int,
        local_now: Optional[datetime.datetime] = None,
    ) -> bool:
        """
        Apply a newly received location, recomputing if it changed.

        Args:
            latitude: Degrees, positive north
            longitude: Degrees, positive east
            utc_offset: Seconds added to local time to obtain UTC
            local_now: Local time to recompute for (default: now)

        Returns:
            True if the bands were recomputed
        """
        logger.debug(f"Got coords {latitude}, {longitude}, utc offset {utc_offset}")

        if not self.location_provider.is_different(latitude, longitude, utc_offset):
            return False

        if not self.location_provider.set(latitude, longitude, utc_offset):
            logger.warning("Location update could not be saved")
            return False

        if local_now is None:
            local_now = self.local_now()
        return self.update_day_and_night(local_now, force=True)

    def update_day_and_night(
        self, local_now: datetime.datetime, force: bool = False
    ) -> bool:
        """
        Recompute every band for the current local day.

        Does nothing if the bands already reflect this day, unless forced.
        Requires a known location.

        Args:
            local_now: Current local time
            force: Recompute even if the day has not changed

        Returns:
            True if the bands were recomputed
        """
        location = self.location_provider.get()
        if location is None:
            return False

        if not force and self.last_update_day == local_now.day:
            return False

        local_date = local_now.date()
        for band in self.bands.values():
            band.recompute(local_date, location)

        if self.lunar is not None:
            utc_now = local_now + datetime.timedelta(seconds=location.utc_offset)
            self.moon_phase = self.lunar.get_moon_phase(utc_now, location.latitude)
            if self.moon_phase is not None:
                logger.info(
                    f"Moon: {self.moon_phase.phase_name}, "
                    f"{self.moon_phase.illumination:.0f}% illuminated"
                )

        self.last_update_day = local_now.day
        logger.info(f"Twilight bands updated for {local_date}")
        return True

    def render_bands(self, surface: RenderSurface, rect: Rect) -> bool:
        """
        Draw all bands in order, darkest first.

        Starting from a white surface, the night band blackens the bottom;
        each lighter band then greys the remaining sky with its overlay and
        restores white above its own dawn/dusk hands.

        Returns:
            False if no location is known yet and nothing was drawn
        """
        if not self.location_provider.available:
            return False

        for band_def in self.layout:
            self.bands[band_def.name].render(surface, band_def.fill_color, rect)
        return True

    def close(self) -> None:
        """Release all bands."""
        for band in self.bands.values():
            band.close()

    def __enter__(self) -> "WatchfaceController":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
