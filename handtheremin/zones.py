"""Depth zones, depth estimation from 2-D landmarks, and the view-to-surface mapping."""

import math
from enum import Enum
from typing import Optional, Tuple

from handtheremin.config import ZoneConfig
from handtheremin.hand_features import HandObservation, calculate_euclidean_distance
from handtheremin.util import clamp

MIN_FOV_DEG, MAX_FOV_DEG = 20.0, 140.0
MIN_PIXEL_SEPARATION = 2.0
MIN_MAPPING_SPAN = 0.1


class Zone(Enum):
    NONE = 'none'
    POINTER = 'pointer'
    PAD = 'pad'


def classify_zone(
    previous: Zone, depth_m: Optional[float], config: ZoneConfig = None
) -> Zone:
    """
    Zone of a hand at ``depth_m`` meters, with hysteresis on the pad boundary.

    Once in the pad zone the hand stays there until it passes the (farther) exit
    depth. Without a depth estimate the previous zone is held.

    >>> z = Zone.NONE
    >>> for depth in (0.35, 0.31, 0.29, 0.31, 0.33, 0.7):
    ...     z = classify_zone(z, depth)
    ...     print(depth, z.name)
    0.35 POINTER
    0.31 POINTER
    0.29 PAD
    0.31 PAD
    0.33 POINTER
    0.7 NONE
    >>> classify_zone(Zone.PAD, None)
    <Zone.PAD: 'pad'>
    """
    config = config or ZoneConfig()
    if depth_m is None:
        return previous
    if previous is Zone.PAD:
        if depth_m <= config.pad_exit_m:
            return Zone.PAD
    elif depth_m <= config.pad_enter_m:
        return Zone.PAD
    if depth_m <= config.pointer_max_m:
        return Zone.POINTER
    return Zone.NONE


def focal_length_px(image_width: float, fov_deg: float) -> float:
    """
    Pinhole focal length in pixels for a horizontal field of view.

    >>> round(focal_length_px(640, 90), 6)
    320.0
    """
    fov = math.radians(clamp(fov_deg, MIN_FOV_DEG, MAX_FOV_DEG))
    return (image_width / 2) / math.tan(fov / 2)


def estimate_depth_m(
    point1,
    point2,
    image_size: Optional[Tuple[int, int]],
    *,
    fov_deg: float,
    reference_length_m: float,
) -> Optional[float]:
    """
    Distance to the camera of two hand points a known physical length apart.

    Points are in normalized image coordinates. Returns None when the image size
    is unknown or the points are too close (in pixels) to measure.

    >>> round(estimate_depth_m((0.5, 0.5), (0.5, 0.6), (640, 480),
    ...                        fov_deg=90, reference_length_m=0.07), 4)
    0.4667
    >>> estimate_depth_m((0.5, 0.5), (0.5, 0.501), (640, 480),
    ...                  fov_deg=90, reference_length_m=0.07) is None
    True
    """
    if image_size is None or point1 is None or point2 is None:
        return None
    width, height = image_size
    if not width or not height:
        return None
    separation_px = calculate_euclidean_distance(
        (point1[0] * width, point1[1] * height), (point2[0] * width, point2[1] * height)
    )
    if separation_px < MIN_PIXEL_SEPARATION:
        return None
    return reference_length_m * focal_length_px(width, fov_deg) / separation_px


def hand_depth_m(
    hand: HandObservation, image_size=None, config: ZoneConfig = None
) -> Optional[float]:
    """Sensor depth if the tracker gave one, else the wrist to palm estimate."""
    config = config or ZoneConfig()
    if hand.depth_m is not None and hand.depth_m > 0:
        return hand.depth_m
    return estimate_depth_m(
        hand.wrist,
        hand.palm,
        image_size,
        fov_deg=config.camera_fov_deg,
        reference_length_m=config.hand_reference_length_m,
    )


def mapping_rect(config: ZoneConfig = None) -> Tuple[float, float, float, float]:
    """
    The ``(left, top, right, bottom)`` part of the view mapped to the whole surface.

    >>> tuple(round(v, 6) for v in mapping_rect())
    (0.3, 0.25, 0.9, 0.85)
    """
    config = config or ZoneConfig()
    span = max(MIN_MAPPING_SPAN, config.active_mapping_scale)
    cx, cy = config.active_mapping_center
    left = clamp(cx - span / 2, 0.0, 1.0 - span)
    top = clamp(cy - span / 2, 0.0, 1.0 - span)
    return left, top, left + span, top + span


def map_to_surface(x: float, y: float, config: ZoneConfig = None) -> Tuple[float, float]:
    """
    Map a camera-space point to control-surface coordinates in ``[0, 1]``.

    The view is mirrored (selfie view), normalized into the mapping rectangle,
    and flipped vertically so that up is 1.

    >>> tuple(round(v, 6) for v in map_to_surface(0.4, 0.55))
    (0.5, 0.5)
    >>> map_to_surface(1.0, 0.0)
    (0.0, 1.0)
    """
    config = config or ZoneConfig()
    left, top, right, bottom = mapping_rect(config)
    if config.mirror_x:
        x = 1.0 - x
    x_norm = clamp((x - left) / (right - left), 0.0, 1.0)
    y_norm = clamp((y - top) / (bottom - top), 0.0, 1.0)
    return x_norm, 1.0 - y_norm
