"""Tests for twilight band geometry and rendering."""

import datetime
from unittest.mock import MagicMock

import pytest
from PIL import Image

from twilight_clock.data.ephemeris import (
    NO_RISE_SET_TIME,
    ZENITH_ASTRONOMICAL,
    ZENITH_OFFICIAL,
    adjust_timezone,
    calc_sunset,
)
from twilight_clock.location import Location
from twilight_clock.views.colors import BLACK, WHITE, CompositingMode
from twilight_clock.views.surface import PillowSurface, Rect
from twilight_clock.views.tones import Tone
from twilight_clock.views.twilight import (
    POINTS_IN_TWILIGHT_PATH,
    BandState,
    EnclosureSide,
    FaceGeometry,
    TwilightBand,
    signed_area,
)

FACE_RECT = Rect(0, 0, 144, 168)


@pytest.fixture
def nyc_summer():
    return Location(latitude=40.7128, longitude=-74.0060, utc_offset=4 * 3600, last_update=1.0)


@pytest.fixture
def top_band():
    return TwilightBand.create(ZENITH_OFFICIAL, EnclosureSide.TOP)


@pytest.fixture
def bottom_band():
    return TwilightBand.create(ZENITH_ASTRONOMICAL, EnclosureSide.BOTTOM)


class TestFaceGeometry:
    """Tests for the dial layout."""

    def test_default_layout(self):
        geometry = FaceGeometry()
        assert geometry.size == (144, 168)
        assert (geometry.x_left, geometry.x_right) == (-73, 73)
        assert (geometry.y_top, geometry.y_bottom) == (-84, 84)
        assert geometry.hub == (0, 9)
        assert geometry.radius == 120

    def test_radius_reaches_every_corner(self):
        geometry = FaceGeometry()
        hub_x, hub_y = geometry.hub
        for x in (geometry.x_left, geometry.x_right):
            for y in (geometry.y_top, geometry.y_bottom):
                assert ((x - hub_x) ** 2 + (y - hub_y) ** 2) ** 0.5 < geometry.radius

    def test_noon_is_up_and_midnight_is_down(self):
        geometry = FaceGeometry()
        assert geometry.time_to_point(12.0) == (0, 9 - 120)
        assert geometry.time_to_point(0.0) == (0, 9 + 120)

    def test_morning_is_left_and_evening_is_right(self):
        geometry = FaceGeometry()
        assert geometry.time_to_point(6.0) == (-120, 9)
        assert geometry.time_to_point(18.0) == (120, 9)

    def test_scaled_face(self):
        geometry = FaceGeometry(288, 336)
        assert geometry.hub == (0, 18)
        assert geometry.x_right == 145


class TestSignedArea:
    """Tests for polygon winding."""

    def test_clockwise_square_is_negative(self):
        # Clockwise on screen: right, then down, then left
        assert signed_area([(0, 0), (10, 0), (10, 10), (0, 10)]) == -100

    def test_counter_clockwise_square_is_positive(self):
        assert signed_area([(0, 0), (0, 10), (10, 10), (10, 0)]) == 100


class TestBandGeometry:
    """Tests for the five-point path."""

    def test_new_band_is_created_state(self, top_band):
        assert top_band.state is BandState.CREATED
        assert top_band.dawn_time is NO_RISE_SET_TIME
        assert top_band.dusk_time is NO_RISE_SET_TIME
        assert len(top_band.points) == POINTS_IN_TWILIGHT_PATH

    def test_top_band_static_points(self, top_band):
        points = top_band.points
        assert points[0] == (0, 9)
        assert points[2] == (-73, -84)
        assert points[3] == (73, -84)

    def test_bottom_band_static_points(self, bottom_band):
        points = bottom_band.points
        assert points[0] == (0, 9)
        assert points[2] == (73, 84)
        assert points[3] == (-73, 84)

    def test_top_band_clockwise(self, top_band):
        """Test the dawn 06:00 / dusk 18:00 top band path."""
        top_band.set_times(6.0, 18.0)

        assert top_band.points == ((0, 9), (-120, 9), (-73, -84), (73, -84), (120, 9))
        assert signed_area(top_band.points) == -17949

    def test_bottom_band_clockwise(self, bottom_band):
        bottom_band.set_times(6.0, 18.0)

        assert bottom_band.points == ((0, 9), (120, 9), (73, 84), (-73, 84), (-120, 9))
        assert signed_area(bottom_band.points) < 0

    @pytest.mark.parametrize("dawn,dusk", [(4.5, 21.0), (7.25, 16.75), (5.0, 19.5)])
    @pytest.mark.parametrize("side", [EnclosureSide.TOP, EnclosureSide.BOTTOM])
    def test_clockwise_for_typical_days(self, side, dawn, dusk):
        band = TwilightBand.create(ZENITH_OFFICIAL, side)
        band.set_times(dawn, dusk)
        assert signed_area(band.points) < 0

    def test_sentinel_leaves_hand_points(self, top_band):
        top_band.set_times(6.0, 18.0)
        before = top_band.points

        top_band.set_times(NO_RISE_SET_TIME, NO_RISE_SET_TIME)

        assert top_band.state is BandState.COMPUTED
        assert not top_band.has_rise_and_set
        assert top_band.points == before


class TestBandRecompute:
    """Tests for recomputing dawn/dusk from a location."""

    def test_recompute_nyc_solstice(self, top_band, nyc_summer):
        top_band.recompute(datetime.date(2024, 6, 21), nyc_summer)

        assert top_band.state is BandState.COMPUTED
        assert top_band.dawn_time == pytest.approx(5.42, abs=0.02)
        assert top_band.dusk_time == pytest.approx(20.51, abs=0.02)
        assert top_band.points[1] == FaceGeometry().time_to_point(top_band.dawn_time)
        assert top_band.points[4] == FaceGeometry().time_to_point(top_band.dusk_time)

    def test_recompute_can_repeat(self, top_band, nyc_summer):
        top_band.recompute(datetime.date(2024, 6, 21), nyc_summer)
        summer_dusk = top_band.dusk_time

        top_band.recompute(datetime.date(2024, 12, 21), nyc_summer)

        assert top_band.state is BandState.COMPUTED
        assert top_band.dusk_time < summer_dusk

    def test_recompute_polar_night(self, top_band):
        arctic = Location(latitude=70.0, longitude=0.0, utc_offset=0, last_update=1.0)
        top_band.recompute(datetime.date(2024, 12, 21), arctic)

        assert top_band.dawn_time is NO_RISE_SET_TIME
        assert top_band.dusk_time is NO_RISE_SET_TIME

    def test_uses_local_calendar_date_near_midnight(self, top_band, nyc_summer):
        """
        Late evening local time is already the next day in UTC, but the
        local date is what gets computed.
        """
        local_now = datetime.datetime(2024, 6, 21, 23, 30)
        utc_date = (local_now + datetime.timedelta(seconds=nyc_summer.utc_offset)).date()
        assert utc_date == datetime.date(2024, 6, 22)

        top_band.recompute(local_now.date(), nyc_summer)

        local_day = adjust_timezone(
            calc_sunset(2024, 6, 21, nyc_summer.latitude, nyc_summer.longitude, ZENITH_OFFICIAL),
            nyc_summer.tz_in_hours,
        )
        utc_day = adjust_timezone(
            calc_sunset(2024, 6, 22, nyc_summer.latitude, nyc_summer.longitude, ZENITH_OFFICIAL),
            nyc_summer.tz_in_hours,
        )
        assert top_band.dusk_time == local_day
        assert top_band.dusk_time != utc_day


class TestBandRender:
    """Tests for drawing a band onto a surface."""

    def test_sentinel_issues_no_draw_calls(self, top_band):
        surface = MagicMock()
        top_band.set_times(NO_RISE_SET_TIME, 18.0)

        assert top_band.render(surface, WHITE, FACE_RECT) is False
        assert surface.mock_calls == []

    def test_uncomputed_band_issues_no_draw_calls(self, top_band):
        surface = MagicMock()
        assert top_band.render(surface, WHITE, FACE_RECT) is False
        assert surface.mock_calls == []

    def test_render_translates_hub_to_rect_center(self, top_band):
        surface = MagicMock()
        top_band.set_times(6.0, 18.0)

        assert top_band.render(surface, WHITE, Rect(10, 20, 144, 168)) is True

        points = surface.fill_polygon.call_args[0][0]
        assert points[0] == (82, 113)
        assert points == [(x + 82, y + 104) for x, y in top_band.points]

    def test_overlay_drawn_with_and_before_fill(self):
        band = TwilightBand.create(ZENITH_OFFICIAL, EnclosureSide.TOP, Tone.GRAY)
        band.set_times(6.0, 18.0)
        surface = MagicMock()

        band.render(surface, WHITE, FACE_RECT)

        names = [c[0] for c in surface.mock_calls]
        assert names == [
            "set_compositing_mode",
            "draw_image_in_rect",
            "set_fill_color",
            "fill_polygon",
        ]
        surface.set_compositing_mode.assert_called_once_with(CompositingMode.AND)
        surface.draw_image_in_rect.assert_called_once_with(band.overlay, FACE_RECT)
        surface.set_fill_color.assert_called_once_with(WHITE)

    def test_path_rebuilt_every_render(self, top_band):
        top_band.set_times(6.0, 18.0)
        surface = MagicMock()

        top_band.render(surface, WHITE, FACE_RECT)
        first = top_band._path
        top_band.render(surface, WHITE, Rect(5, 5, 144, 168))

        assert top_band._path is not first
        assert first.offset == (72, 84)
        assert top_band._path.offset == (77, 89)

    def test_render_on_pillow_surface(self, bottom_band):
        """Test that a night band blackens the bottom of a white face."""
        bottom_band.set_times(6.0, 18.0)
        surface = PillowSurface.blank(144, 168, WHITE)

        bottom_band.render(surface, BLACK, FACE_RECT)

        assert surface.image.getpixel((72, 160)) == BLACK
        assert surface.image.getpixel((72, 20)) == WHITE


class TestBandLifecycle:
    """Tests for creation failures and teardown."""

    def test_missing_overlay_file(self, tmp_path):
        band = TwilightBand.create(ZENITH_OFFICIAL, EnclosureSide.TOP, tmp_path / "missing.png")
        assert band is None

    def test_invalid_tone_size(self):
        band = TwilightBand.create(
            ZENITH_OFFICIAL, EnclosureSide.TOP, Tone.GRAY, FaceGeometry(0, 0)
        )
        assert band is None

    def test_overlay_from_file(self, tmp_path):
        path = tmp_path / "overlay.png"
        Image.new("RGB", (8, 8), (255, 255, 255)).save(path)

        band = TwilightBand.create(ZENITH_OFFICIAL, EnclosureSide.TOP, path)

        assert band is not None
        assert band.overlay.mode == "L"

    def test_close_releases_and_marks_destroyed(self):
        band = TwilightBand.create(ZENITH_OFFICIAL, EnclosureSide.TOP, Tone.LIGHT_GRAY)
        band.set_times(6.0, 18.0)
        band.render(MagicMock(), WHITE, FACE_RECT)

        band.close()

        assert band.state is BandState.DESTROYED
        assert band.overlay is None
        assert band._path is None

    def test_close_twice_is_harmless(self, top_band):
        top_band.close()
        top_band.close()
        assert top_band.state is BandState.DESTROYED

    def test_destroyed_band_rejects_use(self, top_band, nyc_summer):
        top_band.close()

        with pytest.raises(RuntimeError):
            top_band.recompute(datetime.date(2024, 6, 21), nyc_summer)
        with pytest.raises(RuntimeError):
            top_band.render(MagicMock(), WHITE, FACE_RECT)

    def test_context_manager(self):
        with TwilightBand.create(ZENITH_OFFICIAL, EnclosureSide.TOP) as band:
            assert band.state is BandState.CREATED
        assert band.state is BandState.DESTROYED
