"""Tests for zone classification, depth estimation and surface mapping."""

import pytest

from handtheremin.config import ZoneConfig
from handtheremin.hand_features import HandObservation
from handtheremin.zones import (
    Zone,
    classify_zone,
    estimate_depth_m,
    focal_length_px,
    hand_depth_m,
    map_to_surface,
    mapping_rect,
)


class TestClassifyZone:
    """Tests for the hysteretic zone classifier."""

    def test_pad_hysteresis(self):
        config = ZoneConfig(pad_enter_m=0.30, pad_exit_m=0.32)
        zone = Zone.NONE
        seen = []
        for depth in (0.35, 0.31, 0.29, 0.31, 0.33):
            zone = classify_zone(zone, depth, config)
            seen.append(zone)
        assert seen == [Zone.POINTER, Zone.POINTER, Zone.PAD, Zone.PAD, Zone.POINTER]

    def test_boundaries_are_inclusive(self):
        config = ZoneConfig()
        assert classify_zone(Zone.POINTER, 0.30, config) is Zone.PAD
        assert classify_zone(Zone.PAD, 0.32, config) is Zone.PAD
        assert classify_zone(Zone.NONE, 0.60, config) is Zone.POINTER

    def test_far_hand(self):
        assert classify_zone(Zone.PAD, 0.9) is Zone.NONE

    @pytest.mark.parametrize('previous', list(Zone))
    def test_no_depth_holds_zone(self, previous):
        assert classify_zone(previous, None) is previous


class TestDepthEstimation:
    """Tests for pinhole depth from two landmarks."""

    def test_focal_length(self):
        assert focal_length_px(640, 60) == pytest.approx(554.256, abs=1e-3)

    def test_fov_is_clamped(self):
        assert focal_length_px(640, 5) == focal_length_px(640, 20)
        assert focal_length_px(640, 179) == focal_length_px(640, 140)

    def test_closer_hand_is_bigger(self):
        kwargs = dict(fov_deg=60, reference_length_m=0.07)
        far = estimate_depth_m((0.5, 0.8), (0.5, 0.7), (640, 480), **kwargs)
        near = estimate_depth_m((0.5, 0.8), (0.5, 0.5), (640, 480), **kwargs)
        assert near < far
        assert far == pytest.approx(0.07 * 554.256 / 48, rel=1e-4)

    def test_tiny_separation_gives_no_estimate(self):
        depth = estimate_depth_m(
            (0.5, 0.5), (0.501, 0.5), (640, 480), fov_deg=60, reference_length_m=0.07
        )
        assert depth is None

    def test_unknown_image_size_gives_no_estimate(self):
        depth = estimate_depth_m((0.5, 0.8), (0.5, 0.5), None, fov_deg=60, reference_length_m=0.07)
        assert depth is None

    def test_sensor_depth_wins(self):
        hand = HandObservation(wrist=(0.5, 0.8), palm=(0.5, 0.5), depth_m=0.42)
        assert hand_depth_m(hand, (640, 480)) == 0.42

    def test_estimate_from_landmarks(self):
        hand = HandObservation(wrist=(0.5, 0.8), palm=(0.5, 0.5))
        assert hand_depth_m(hand, (640, 480)) == pytest.approx(0.07 * 554.256 / 144, rel=1e-4)

    def test_missing_points(self):
        assert hand_depth_m(HandObservation(wrist=(0.5, 0.8)), (640, 480)) is None


class TestMapping:
    """Tests for the camera view to control surface mapping."""

    def test_default_rect(self):
        left, top, right, bottom = mapping_rect()
        assert (left, top, right, bottom) == pytest.approx((0.3, 0.25, 0.9, 0.85))

    def test_rect_stays_in_view(self):
        config = ZoneConfig(active_mapping_scale=0.6, active_mapping_center=(0.95, 0.05))
        left, top, right, bottom = mapping_rect(config)
        assert right <= 1.0 + 1e-9 and top >= 0.0
        assert right - left == pytest.approx(0.6)

    def test_up_is_one(self):
        _, y_top = map_to_surface(0.4, 0.3)
        _, y_bottom = map_to_surface(0.4, 0.8)
        assert y_top > y_bottom

    def test_mirrored(self):
        x_left, _ = map_to_surface(0.35, 0.5)
        x_right, _ = map_to_surface(0.65, 0.5)
        assert x_left > x_right

    def test_unmirrored(self):
        config = ZoneConfig(mirror_x=False)
        x_left, _ = map_to_surface(0.35, 0.5, config)
        x_right, _ = map_to_surface(0.65, 0.5, config)
        assert x_left < x_right

    def test_outside_rect_is_clamped(self):
        assert map_to_surface(-1.0, 2.0) == (1.0, 0.0)
