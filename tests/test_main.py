"""Tests for main application lifecycle and TwilightClock class."""

import datetime
import signal
from io import BytesIO
from unittest.mock import MagicMock, Mock, patch

import pytest
from PIL import Image

from twilight_clock.config import LocationConfig
from twilight_clock.http_server import ClockRequestHandler
from twilight_clock.main import (
    STATUS_BODY,
    STATUS_TITLE,
    TwilightClock,
    main,
    seconds_until_next_minute,
)


def _build_clock(config):
    with patch("twilight_clock.main.Display"):
        with patch("twilight_clock.main.create_server", return_value=None):
            return TwilightClock(config)


class TestTwilightClock:
    """Tests for the TwilightClock class."""

    @pytest.fixture
    def clock(self, sample_config):
        """Clock seeded with New York from the config."""
        clock = _build_clock(sample_config)
        yield clock
        clock.controller.close()

    @pytest.fixture
    def unlocated_clock(self, sample_config, tmp_path):
        """Clock with no location seed and no stored location."""
        sample_config.location = LocationConfig(store_path=str(tmp_path / "none.json"))
        clock = _build_clock(sample_config)
        yield clock
        clock.controller.close()

    def test_initialization(self, clock, sample_config):
        """Test TwilightClock initialization."""
        assert clock.config == sample_config
        assert clock.running is False
        assert clock._last_frame is None
        assert clock.dial is not None
        assert list(clock.controller.bands) == ["night", "astro", "nautical", "civil"]

    def test_seed_from_config(self, clock):
        loc = clock.location_provider.get()
        assert (loc.latitude, loc.longitude, loc.utc_offset) == (40.7128, -74.006, 14400)

    def test_stored_location_wins_over_seed(self, sample_config):
        first = _build_clock(sample_config)
        first.controller.update_location(51.5074, -0.1278, -3600)
        first.controller.close()

        second = _build_clock(sample_config)

        assert second.location_provider.get().latitude == 51.5074
        second.controller.close()

    def test_band_creation_failure(self, sample_config):
        with patch("twilight_clock.main.WatchfaceController.create", return_value=None):
            with pytest.raises(RuntimeError):
                _build_clock(sample_config)

    def test_get_last_frame(self, clock):
        """Test get_last_frame returns cached frame."""
        test_frame = Image.new("L", (144, 168))
        clock._last_frame = test_frame

        assert clock.get_last_frame() is test_frame

    def test_render_frame_watchface(self, clock, mocker):
        spy = mocker.spy(clock.watchface, "render")
        now = datetime.datetime(2024, 6, 21, 12, 0)

        frame = clock.render_frame(now)

        spy.assert_called_once_with(now)
        assert frame.size == (144, 168)

    def test_render_frame_status_without_location(self, unlocated_clock, mocker):
        spy = mocker.spy(unlocated_clock.status_view, "render")

        frame = unlocated_clock.render_frame(datetime.datetime(2024, 6, 21, 12, 0))

        spy.assert_called_once()
        assert unlocated_clock.status_view.title == STATUS_TITLE
        assert unlocated_clock.status_view.body == STATUS_BODY
        assert frame.size == (144, 168)

    def test_tick_recomputes_and_writes(self, clock):
        frame = clock.tick()

        assert clock.controller.last_update_day is not None
        assert clock._last_frame is frame
        clock.display.write_frame.assert_called_once_with(frame)

    def test_screenshot_does_not_touch_bands(self, clock, mocker):
        """Test screenshots are served from the main loop's frame."""
        frame = clock.tick()
        render_spy = mocker.spy(clock.controller, "render_bands")

        ClockRequestHandler.clock_instance = clock
        ClockRequestHandler.rate_limiter = None
        ClockRequestHandler.auth_credentials = None
        handler = object.__new__(ClockRequestHandler)
        handler.path = "/screenshot"
        handler.headers = {}
        handler.wfile = BytesIO()
        handler.client_address = ("127.0.0.1", 12345)
        handler.send_response = Mock()
        handler.send_header = Mock()
        handler.end_headers = Mock()

        handler.do_GET()

        handler.send_response.assert_called_with(200)
        render_spy.assert_not_called()
        served = Image.open(BytesIO(handler.wfile.getvalue()))
        assert served.size == frame.size

    def test_queue_location_wakes_loop(self, clock):
        clock.queue_location(51.5074, -0.1278, -3600)

        assert clock.wake.is_set()
        assert clock._pending_location == (51.5074, -0.1278, -3600)

    def test_apply_pending_location(self, clock):
        clock.queue_location(51.5074, -0.1278, -3600)

        assert clock.apply_pending_location() is True
        assert clock.location_provider.get().latitude == 51.5074
        assert clock.apply_pending_location() is False

    def test_only_latest_queued_location_applied(self, clock, mocker):
        spy = mocker.spy(clock.controller, "update_location")
        clock.queue_location(1.0, 1.0, 0)
        clock.queue_location(2.0, 2.0, 0)

        clock.apply_pending_location()

        spy.assert_called_once_with(2.0, 2.0, 0)

    def test_first_location_switches_to_watchface(self, unlocated_clock, mocker):
        watchface_spy = mocker.spy(unlocated_clock.watchface, "render")
        unlocated_clock.queue_location(40.7128, -74.006, 14400)

        unlocated_clock.tick()

        watchface_spy.assert_called_once()

    def test_signal_handler_stops_and_wakes(self, clock):
        """Test signal handler stops the loop and interrupts the sleep."""
        clock.running = True

        clock._signal_handler(signal.SIGINT, None)

        assert clock.running is False
        assert clock.wake.is_set()

    def test_cleanup(self, clock):
        """Test cleanup stops all components."""
        clock.http_server = MagicMock()
        clock.display = MagicMock()

        clock._cleanup()

        clock.http_server.shutdown.assert_called_once()
        clock.display.close.assert_called_once()
        assert all(b.state.value == "destroyed" for b in clock.controller.bands.values())

    def test_run_exits_if_display_fails(self, clock):
        """Test run exits if display fails to open."""
        clock.display = MagicMock()
        clock.display.open.return_value = False
        clock.tick = MagicMock()

        clock.run()

        clock.tick.assert_not_called()

    @patch("twilight_clock.main.start_server_thread")
    @patch("twilight_clock.main.signal.signal")
    def test_run_loop(self, mock_signal, mock_start_thread, clock):
        """Test run starts the server, registers signals and ticks."""
        clock.display = MagicMock()
        clock.display.open.return_value = True
        clock.http_server = MagicMock()
        clock.tick = MagicMock(side_effect=lambda: clock._signal_handler(signal.SIGTERM, None))

        clock.run()

        mock_start_thread.assert_called_once_with(clock.http_server)
        signal_calls = [c[0][0] for c in mock_signal.call_args_list]
        assert signal.SIGINT in signal_calls
        assert signal.SIGTERM in signal_calls
        clock.tick.assert_called_once()
        clock.display.close.assert_called_once()


class TestHelpers:
    """Tests for module helpers."""

    def test_seconds_until_next_minute(self):
        assert seconds_until_next_minute(datetime.datetime(2024, 1, 1, 12, 0, 30)) == 30
        assert seconds_until_next_minute(
            datetime.datetime(2024, 1, 1, 12, 0, 59, 500000)
        ) == pytest.approx(0.5)


class TestMain:
    """Tests for the command line entry point."""

    def test_missing_config(self, tmp_path):
        with patch("sys.argv", ["twilight-clock", "-c", str(tmp_path / "missing.json")]):
            assert main() == 1

    def test_invalid_config(self, tmp_path):
        bad = tmp_path / "bad.json"
        bad.write_text("{")
        with patch("sys.argv", ["twilight-clock", "-c", str(bad)]):
            assert main() == 1

    def test_runs_clock(self, temp_config_file):
        with patch("sys.argv", ["twilight-clock", "-c", str(temp_config_file), "--bind-all"]):
            with patch("twilight_clock.main.TwilightClock") as mock_clock:
                assert main() == 0

        config = mock_clock.call_args[0][0]
        assert config.http_server.bind_address == "0.0.0.0"
        mock_clock.return_value.run.assert_called_once()

    def test_startup_failure(self, temp_config_file):
        with patch("sys.argv", ["twilight-clock", "-c", str(temp_config_file)]):
            with patch(
                "twilight_clock.main.TwilightClock", side_effect=RuntimeError("no bands")
            ):
                assert main() == 1
