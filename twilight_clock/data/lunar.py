"""Lunar phase provider using ephem library."""

import datetime
import logging
from dataclasses import dataclass
from typing import Optional

import ephem

logger = logging.getLogger(__name__)

SYNODIC_MONTH = 29.530588853

# Phase glyphs run 0 (new) through 27, with 14 as full
PHASE_STEPS = 27
PHASE_GLYPHS = 28


@dataclass
class MoonPhase:
    """Moon phase data for one instant."""
    lunation: float        # 0-1 (0=new, 0.5=full)
    illumination: float    # 0-100 percentage
    phase_name: str        # "New Moon", "Waxing Crescent", etc.
    phase_index: int       # 0-27, mirrored for the southern hemisphere


class LunarProvider:
    """
    Provides the moon phase shown on the watchface.

    The phase index follows the hemisphere of the current location, so a
    waxing moon is drawn lit on the correct side for the viewer.
    """

    def get_moon_phase(
        self, when: Optional[datetime.datetime] = None, latitude: float = 0.0
    ) -> Optional[MoonPhase]:
        """
        Get moon phase data.

        Args:
            when: UTC datetime to calculate for (default: now)
            latitude: Observer latitude, used for hemisphere correction

        Returns:
            MoonPhase, or None if ephem could not compute it
        """
        if when is None:
            when = datetime.datetime.now(datetime.timezone.utc).replace(tzinfo=None)

        try:
            moon = ephem.Moon()
            moon.compute(when)

            prev_new = ephem.previous_new_moon(when)
            days_since_new = ephem.Date(when) - prev_new
            lunation = (days_since_new / SYNODIC_MONTH) % 1.0

            return MoonPhase(
                lunation=lunation,
                illumination=moon.phase,
                phase_name=self._get_phase_name(lunation),
                phase_index=self.phase_index(lunation, latitude),
            )

        except (ValueError, TypeError) as e:
            logger.warning(f"Failed to calculate moon phase: {e}")
            return None

    @staticmethod
    def phase_index(lunation: float, latitude: float) -> int:
        """
        Scale a lunation fraction to a 0-27 phase step.

        Args:
            lunation: Fraction of the synodic month since new moon
            latitude: Observer latitude; negative mirrors the phase

        Returns:
            Phase step, 0 for new moon and 14 for full
        """
        index = int(lunation * PHASE_STEPS + 0.5) % PHASE_GLYPHS
        if index > 0 and latitude < 0:
            index = PHASE_GLYPHS - index
        return index

    @staticmethod
    def _get_phase_name(phase: float) -> str:
        """
        Get moon phase name from phase value.

        Args:
            phase: Phase value 0-1 (0=new, 0.5=full)

        Returns:
            Human-readable phase name
        """
        if phase < 0.03:
            return "New Moon"
        elif phase < 0.22:
            return "Waxing Crescent"
        elif phase < 0.28:
            return "First Quarter"
        elif phase < 0.47:
            return "Waxing Gibbous"
        elif phase < 0.53:
            return "Full Moon"
        elif phase < 0.72:
            return "Waning Gibbous"
        elif phase < 0.78:
            return "Last Quarter"
        elif phase < 0.97:
            return "Waning Crescent"
        else:
            return "New Moon"
