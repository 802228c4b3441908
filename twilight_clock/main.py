"""Main entry point for Twilight Clock."""

import argparse
import datetime
import logging
import signal
import sys
import threading
from pathlib import Path
from typing import Optional

from PIL import Image

from .config import Config, load_config
from .controller import WatchfaceController
from .data import LunarProvider
from .display import Display
from .http_server import create_server, start_server_thread
from .location import LocationProvider
from .views import DialOverlay, FaceGeometry, MessageView, WatchfaceView

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    handlers=[
        logging.StreamHandler(sys.stdout),
    ],
)

logger = logging.getLogger(__name__)

STATUS_TITLE = "Getting Location"
STATUS_BODY = "Obtaining initial location data."


def seconds_until_next_minute(now: datetime.datetime) -> float:
    """Seconds from now until the next whole minute."""
    return 60 - now.second - now.microsecond / 1_000_000


class TwilightClock:
    """Main Twilight Clock application."""

    def __init__(self, config: Config):
        """
        Initialize the Twilight Clock application.

        Args:
            config: Application configuration

        Raises:
            RuntimeError: If the twilight bands could not be created
        """
        self.config = config
        self.running = False
        self._last_frame: Optional[Image.Image] = None

        # Location updates arrive on the HTTP thread and are applied here
        self._pending_location: Optional[tuple[float, float, int]] = None
        self._lock = threading.Lock()
        self.wake = threading.Event()

        self.location_provider = LocationProvider(Path(config.location.store_path))
        self.location_provider.load()
        if not self.location_provider.available and config.location.has_seed:
            self.location_provider.set(
                config.location.latitude,
                config.location.longitude,
                config.location.utc_offset_seconds,
            )

        geometry = FaceGeometry(config.display.face_width, config.display.face_height)
        controller = WatchfaceController.create(
            self.location_provider, geometry, lunar=LunarProvider()
        )
        if controller is None:
            raise RuntimeError("Could not create twilight bands")
        self.controller = controller

        self.dial = DialOverlay.create(geometry)
        self.watchface = WatchfaceView(config, self.controller, self.dial)
        self.status_view = MessageView(config, STATUS_TITLE, STATUS_BODY)

        self.display = Display(config.display)

        self.http_server = create_server(config.http_server, self)
        self.http_thread = None

    def get_last_frame(self) -> Optional[Image.Image]:
        """Get the last rendered frame (for HTTP screenshots)."""
        return self._last_frame

    def queue_location(self, latitude: float, longitude: float, utc_offset: int) -> None:
        """
        Hand a received location to the main loop.

        Safe to call from any thread. Only the latest location is kept.
        """
        with self._lock:
            self._pending_location = (latitude, longitude, utc_offset)
        self.wake.set()

    def apply_pending_location(self) -> bool:
        """
        Apply a queued location update, if any.

        Returns:
            True if the bands were recomputed
        """
        with self._lock:
            pending = self._pending_location
            self._pending_location = None

        if pending is None:
            return False
        return self.controller.update_location(*pending)

    def render_frame(self, now: Optional[datetime.datetime] = None) -> Image.Image:
        """
        Render the watchface, or the status window while no location is known.

        Args:
            now: Local time to render for (default: now)

        Returns:
            Rendered frame at watch face size
        """
        if now is None:
            now = self.controller.local_now()

        if self.location_provider.available:
            return self.watchface.render(now)
        return self.status_view.render(now)

    def tick(self) -> Image.Image:
        """Run one pass of the main loop and return the frame shown."""
        self.apply_pending_location()

        now = self.controller.local_now()
        self.controller.update_day_and_night(now)

        frame = self.render_frame(now)
        self._last_frame = frame
        self.display.write_frame(frame)
        return frame

    def run(self) -> None:
        """Run the main application loop."""
        logger.info("Starting Twilight Clock...")

        if not self.display.open():
            logger.error("Failed to open display")
            return

        if self.http_server:
            self.http_thread = start_server_thread(self.http_server)
            logger.info(f"HTTP server running on port {self.config.http_server.port}")

        signal.signal(signal.SIGINT, self._signal_handler)
        signal.signal(signal.SIGTERM, self._signal_handler)

        self.running = True
        logger.info("Twilight Clock running. Press Ctrl+C to stop.")

        try:
            while self.running:
                self.tick()

                # Sleep until the minute changes or a location arrives
                timeout = seconds_until_next_minute(datetime.datetime.now())
                self.wake.wait(timeout=timeout)
                self.wake.clear()

        except Exception as e:
            logger.error(f"Error in main loop: {e}", exc_info=True)
        finally:
            self._cleanup()

    def _signal_handler(self, signum, frame) -> None:
        """Handle shutdown signals."""
        logger.info(f"Received signal {signum}, shutting down...")
        self.running = False
        self.wake.set()

    def _cleanup(self) -> None:
        """Clean up resources on shutdown."""
        logger.info("Cleaning up...")

        if self.http_server:
            self.http_server.shutdown()

        self.controller.close()
        if self.dial is not None:
            self.dial.close()

        self.display.close()

        logger.info("Cleanup complete")


def main() -> int:
    """Main entry point."""
    parser = argparse.ArgumentParser(
        description="Twilight Clock - 24-hour sun and twilight watch face"
    )
    parser.add_argument(
        "-c",
        "--config",
        type=Path,
        help="Path to config.json file",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    parser.add_argument(
        "--bind-all",
        action="store_true",
        help="Bind HTTP server to all interfaces (0.0.0.0) instead of localhost",
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    try:
        config = load_config(args.config)
    except FileNotFoundError as e:
        logger.error(f"Config file not found: {e}")
        logger.info("Create a config.json from config.example.json")
        return 1
    except ValueError as e:
        logger.error(f"Invalid configuration: {e}")
        return 1

    if args.bind_all:
        config.http_server.bind_address = "0.0.0.0"
        logger.warning("HTTP server will bind to all interfaces (0.0.0.0)")

    try:
        clock = TwilightClock(config)
    except RuntimeError as e:
        logger.error(f"Startup failed: {e}")
        return 1

    clock.run()

    return 0


if __name__ == "__main__":
    sys.exit(main())
