"""
Tests for the camera optics module.
"""

import math

import pytest
from numpy.testing import assert_allclose

from missiongeo.errors import InvalidHardwareParameters, InvalidInput
from missiongeo.optics import (
    CIRCLE_OF_CONFUSION_MM,
    INFINITE,
    CameraSpec,
    Finite,
    FocusState,
    LensSpec,
    compute_depth_of_field,
    compute_field_of_view,
    depth_of_field_for_focus,
    feet_to_meters,
    ground_sample_distance_cm,
    hyperfocal_distance_m,
    meters_to_feet,
)


@pytest.fixture
def full_frame():
    """36x24 mm full-frame sensor."""
    return CameraSpec(sensor_width_mm=36.0, sensor_height_mm=24.0, name="Full Frame",
                      image_width_px=7008, image_height_px=4672)


@pytest.fixture
def normal_lens():
    """50 mm prime."""
    return LensSpec(focal_length_mm=50.0, aperture_stops=(8, 1.8, 2.8, 4, 5.6, 11, 16))


@pytest.fixture
def zoom_lens():
    return LensSpec(focal_length_mm=[24, 70], aperture_stops=[2.8, 4, 5.6, 8], name="24-70")


class TestFieldOfView:
    """Tests for field of view and footprint."""

    def test_known_values(self, full_frame, normal_lens):
        frustum = compute_field_of_view(full_frame, normal_lens)

        assert frustum.horizontal_fov_rad == pytest.approx(2 * math.atan(36 / 100))
        assert frustum.vertical_fov_rad == pytest.approx(2 * math.atan(24 / 100))
        assert frustum.horizontal_fov_deg == pytest.approx(39.5977, abs=1e-3)

    def test_monotonic_in_focal_length(self, full_frame):
        """Longer lens gives a narrower field of view."""
        fovs = [
            compute_field_of_view(full_frame, LensSpec(focal_length_mm=f, aperture_stops=(8,)))
            for f in (8.8, 24, 35, 50, 85, 200, 600)
        ]

        for wider, narrower in zip(fovs, fovs[1:]):
            assert narrower.horizontal_fov_rad < wider.horizontal_fov_rad
            assert narrower.vertical_fov_rad < wider.vertical_fov_rad

    def test_monotonic_in_sensor_size(self, normal_lens):
        """Larger sensor gives a wider field of view."""
        fovs = [
            compute_field_of_view(CameraSpec(sensor_width_mm=w, sensor_height_mm=w * 2 / 3), normal_lens)
            for w in (6.17, 13.2, 23.5, 36.0, 53.4)
        ]

        for narrower, wider in zip(fovs, fovs[1:]):
            assert wider.horizontal_fov_rad > narrower.horizontal_fov_rad
            assert wider.vertical_fov_rad > narrower.vertical_fov_rad

    def test_footprint_scales_linearly(self, full_frame, normal_lens):
        """Doubling the distance exactly doubles the footprint."""
        frustum = compute_field_of_view(full_frame, normal_lens)

        for d in (0.37, 1.0, 10.0, 123.456, 5e4):
            assert frustum.width_at_distance(2 * d) == 2 * frustum.width_at_distance(d)
            assert frustum.height_at_distance(2 * d) == 2 * frustum.height_at_distance(d)

    def test_footprint_at_focus(self, full_frame, normal_lens):
        """Footprint at d is sensor size scaled by d / f."""
        frustum = compute_field_of_view(full_frame, normal_lens)

        assert_allclose(frustum.footprint_at_distance(10.0), (36 * 10 / 50, 24 * 10 / 50))

    def test_zero_distance(self, full_frame, normal_lens):
        frustum = compute_field_of_view(full_frame, normal_lens)

        assert frustum.width_at_distance(0.0) == 0.0
        assert frustum.height_at_distance(0.0) == 0.0

    @pytest.mark.parametrize("distance", [-1.0, float('nan'), float('inf')])
    def test_bad_distance(self, full_frame, normal_lens, distance):
        frustum = compute_field_of_view(full_frame, normal_lens)

        with pytest.raises(InvalidInput):
            frustum.width_at_distance(distance)

    @pytest.mark.parametrize("camera, lens", [
        (CameraSpec(0.0, 24.0), LensSpec(50.0, (8,))),
        (CameraSpec(36.0, -1.0), LensSpec(50.0, (8,))),
        (CameraSpec(36.0, 24.0), LensSpec(0.0, (8,))),
        (CameraSpec(36.0, 24.0), LensSpec(-35.0, (8,))),
        (CameraSpec(float('nan'), 24.0), LensSpec(50.0, (8,))),
    ])
    def test_invalid_hardware(self, camera, lens):
        """Never falls back to a default field of view."""
        with pytest.raises(InvalidHardwareParameters):
            compute_field_of_view(camera, lens)


class TestZoomLens:
    """Zoom lenses need the focal length in effect."""

    def test_requires_focal_length(self, full_frame, zoom_lens):
        assert zoom_lens.is_zoom
        with pytest.raises(InvalidHardwareParameters):
            compute_field_of_view(full_frame, zoom_lens)

    def test_uses_given_focal_length(self, full_frame, zoom_lens, normal_lens):
        assert compute_field_of_view(full_frame, zoom_lens, 50.0) == \
            compute_field_of_view(full_frame, normal_lens)

    def test_out_of_range(self, full_frame, zoom_lens):
        with pytest.raises(InvalidHardwareParameters):
            compute_field_of_view(full_frame, zoom_lens, 85.0)

    def test_prime_rejects_other_focal_length(self, full_frame, normal_lens):
        assert compute_field_of_view(full_frame, normal_lens, 50.0) == \
            compute_field_of_view(full_frame, normal_lens)
        with pytest.raises(InvalidHardwareParameters):
            compute_field_of_view(full_frame, normal_lens, 35.0)

    def test_lens_spec_is_hashable(self, zoom_lens):
        assert zoom_lens.focal_length_mm == (24.0, 70.0)
        assert zoom_lens.aperture_stops == (2.8, 4.0, 5.6, 8.0)
        assert hash(zoom_lens) == hash(LensSpec((24, 70), (8, 5.6, 4, 2.8), name="24-70"))


class TestDepthOfField:
    """Tests for hyperfocal depth of field."""

    def test_hyperfocal(self, normal_lens):
        expected_mm = 50.0 ** 2 / (8 * CIRCLE_OF_CONFUSION_MM) + 50.0

        assert hyperfocal_distance_m(normal_lens, 8) == pytest.approx(expected_mm / 1000)

    def test_finite_limits_around_focus(self, full_frame, normal_lens):
        """50 mm at f/8 focused at 10 m: near < 10 < far, both finite."""
        result = compute_depth_of_field(10.0, full_frame, normal_lens, 8)

        assert isinstance(result.far_limit, Finite)
        assert isinstance(result.total_depth, Finite)
        assert result.near_limit_m < 10.0 < result.far_limit.meters
        assert result.near_limit_m == pytest.approx(5.1146, abs=1e-3)
        assert result.far_limit.meters == pytest.approx(223.21, abs=0.05)
        assert result.total_depth.meters == pytest.approx(
            result.far_limit.meters - result.near_limit_m)

    @pytest.mark.parametrize("factor", [1.0001, 1.5, 10.0])
    def test_beyond_hyperfocal(self, full_frame, normal_lens, factor):
        """At or beyond hyperfocal: far is infinite, near is half the hyperfocal distance."""
        hyperfocal = hyperfocal_distance_m(normal_lens, 8)
        result = compute_depth_of_field(hyperfocal * factor, full_frame, normal_lens, 8)

        assert result.far_limit is INFINITE
        assert result.total_depth is INFINITE
        assert result.far_limit.is_infinite
        assert result.near_limit_m == hyperfocal / 2
        assert result.hyperfocal_distance_m == hyperfocal

    def test_near_limit_approaches_half_hyperfocal(self, full_frame, normal_lens):
        """Just short of hyperfocal the near limit is close to H/2 and far is huge but finite."""
        hyperfocal = hyperfocal_distance_m(normal_lens, 8)
        result = compute_depth_of_field(hyperfocal * 0.999, full_frame, normal_lens, 8)

        assert not result.far_limit.is_infinite
        assert result.far_limit.meters > 1000
        assert result.near_limit_m == pytest.approx(hyperfocal / 2, rel=1e-2)

    def test_smaller_aperture_deepens_field(self, full_frame, normal_lens):
        wide = compute_depth_of_field(5.0, full_frame, normal_lens, 2.8)
        narrow = compute_depth_of_field(5.0, full_frame, normal_lens, 16)

        assert narrow.near_limit_m < wide.near_limit_m
        assert narrow.total_depth.meters > wide.total_depth.meters

    def test_describe(self, full_frame, normal_lens):
        assert compute_depth_of_field(10.0, full_frame, normal_lens, 8).describe() == \
            "From 5.11m to 223.21m"
        assert compute_depth_of_field(20.0, full_frame, normal_lens, 8).describe() == \
            "From 5.23m to infinity"

    @pytest.mark.parametrize("focus, f_stop", [
        (10.0, 0.0),
        (0.0, 8.0),
        (-1.0, 8.0),
        (10.0, -2.8),
        (float('nan'), 8.0),
        (10.0, float('inf')),
    ])
    def test_invalid_parameters(self, full_frame, normal_lens, focus, f_stop):
        """Bad values fail instead of producing NaN or infinity."""
        with pytest.raises(InvalidHardwareParameters):
            compute_depth_of_field(focus, full_frame, normal_lens, f_stop)

    def test_invalid_focal_length(self, full_frame):
        with pytest.raises(InvalidHardwareParameters):
            compute_depth_of_field(10.0, full_frame, LensSpec(0.0, (8,)), 8)

    @pytest.mark.parametrize("focus, f_stop", [
        (0.03, 64000),
        (0.05, 8),
        (0.01, 8),
    ])
    def test_focus_inside_focal_length(self, full_frame, normal_lens, focus, f_stop):
        """Focusing at or inside the 50 mm focal length has no sharp range."""
        with pytest.raises(InvalidHardwareParameters, match="focal length"):
            compute_depth_of_field(focus, full_frame, normal_lens, f_stop)

    def test_close_focus_near_limit_positive(self, full_frame, normal_lens):
        result = compute_depth_of_field(0.06, full_frame, normal_lens, 8)

        assert 0 < result.near_limit_m < 0.06 < result.far_limit.meters


class TestFocusState:
    """Tests for FocusState-driven depth of field."""

    def test_matches_direct_call(self, full_frame, normal_lens):
        focus = FocusState(focus_distance_m=10.0, f_stop=8)

        assert depth_of_field_for_focus(focus, full_frame, normal_lens) == \
            compute_depth_of_field(10.0, full_frame, normal_lens, 8)

    def test_rejects_unavailable_stop(self, full_frame, normal_lens):
        with pytest.raises(InvalidHardwareParameters):
            depth_of_field_for_focus(FocusState(10.0, 6.3), full_frame, normal_lens)

    def test_transitions_produce_new_state(self):
        focus = FocusState(focus_distance_m=10.0, f_stop=8)
        moved = focus.with_focus_distance(25.0).with_f_stop(11)

        assert focus == FocusState(10.0, 8)
        assert moved == FocusState(25.0, 11)


class TestGroundSampleDistance:

    def test_known_value(self, full_frame, normal_lens):
        # 100 m * 100 cm * 36 mm / (50 mm * 7008 px)
        assert ground_sample_distance_cm(100.0, full_frame, normal_lens) == \
            pytest.approx(100 * 100 * 36 / (50 * 7008))

    def test_requires_image_width(self, normal_lens):
        with pytest.raises(InvalidHardwareParameters):
            ground_sample_distance_cm(100.0, CameraSpec(36.0, 24.0), normal_lens)


def test_unit_conversion():
    assert meters_to_feet(1.0) == pytest.approx(3.28084)
    assert feet_to_meters(meters_to_feet(12.5)) == pytest.approx(12.5)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
