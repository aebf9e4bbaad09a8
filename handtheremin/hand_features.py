"""Normalized hand observations, and the feature extraction that feeds them."""

import math
from dataclasses import dataclass
from typing import Optional, Sequence, Tuple

import numpy as np

from handtheremin.util import HandLandmark, clamp

Point = Tuple[float, float]
ImageSize = Tuple[int, int]  # (width, height) in pixels

LEFT, RIGHT = 'left', 'right'

# Pinch scale (wrist -> palm distance) floor, in normalized units.
MIN_HAND_SCALE = 1e-4

# -------------------------------------------------------------------------------
# Observation types
# -------------------------------------------------------------------------------


@dataclass(frozen=True)
class HandObservation:
    """
    One tracked hand, in normalized image coordinates (origin top-left, 0..1).

    Attributes:
        handedness: 'left', 'right' or None when the tracker is unsure.
        palm: Stable palm reference point (middle finger MCP), drives position.
        wrist: Wrist point. Scale reference for pinch, height for resonance.
        thumb_tip: Thumb tip, for pinch detection.
        index_tip: Index finger tip, for pinch detection.
        palm_facing: How squarely the palm faces the camera, in [0, 1].
        depth_m: Distance to the camera in meters, when a depth sensor gives it.
        pinch_ratio: Thumb-index distance over hand scale, when the tracker
            computes it itself.
    """

    handedness: Optional[str] = None
    palm: Optional[Point] = None
    wrist: Optional[Point] = None
    thumb_tip: Optional[Point] = None
    index_tip: Optional[Point] = None
    palm_facing: Optional[float] = None
    depth_m: Optional[float] = None
    pinch_ratio: Optional[float] = None

    def __post_init__(self):
        object.__setattr__(self, 'handedness', normalize_handedness(self.handedness))

    @property
    def anchor_x(self) -> Optional[float]:
        """Horizontal position used to order hands (wrist, falling back to palm)."""
        point = self.wrist or self.palm
        return None if point is None else point[0]


@dataclass(frozen=True)
class LandmarkFrame:
    """The hands seen in one tracking frame."""

    hands: Tuple[HandObservation, ...] = ()
    timestamp: Optional[float] = None
    image_size: Optional[ImageSize] = None

    def __post_init__(self):
        object.__setattr__(self, 'hands', tuple(self.hands or ()))


def normalize_handedness(label) -> Optional[str]:
    """
    Map the various handedness labels trackers use to 'left', 'right' or None.

    >>> normalize_handedness('Left'), normalize_handedness(' RIGHT '), normalize_handedness('?')
    ('left', 'right', None)
    >>> normalize_handedness('l'), normalize_handedness(None)
    ('left', None)
    """
    if not isinstance(label, str):
        return None
    label = label.strip().lower()
    if label in ('left', 'l'):
        return LEFT
    if label in ('right', 'r'):
        return RIGHT
    return None


# -------------------------------------------------------------------------------
# Hand feature extraction helpers
# -------------------------------------------------------------------------------


def calculate_euclidean_distance(point1, point2):
    """
    Calculate the Euclidean distance between two points (2-D or 3-D).

    >>> calculate_euclidean_distance((0, 0), (3, 4))
    5.0
    """
    return math.sqrt(sum((a - b) ** 2 for a, b in zip(point1, point2)))


def calculate_palm_normal(wrist, index_mcp, pinky_mcp) -> np.ndarray:
    """Normal of the palm plane: cross product of two palm-edge vectors."""
    v1 = np.asarray(index_mcp, dtype=float) - np.asarray(wrist, dtype=float)
    v2 = np.asarray(pinky_mcp, dtype=float) - np.asarray(wrist, dtype=float)
    return np.cross(v1, v2)


def palm_facing_score(wrist, index_mcp, pinky_mcp) -> Optional[float]:
    """
    Score in [0, 1] of how much the palm faces the camera.

    Camera space has z as depth, so the z component of the unit palm normal is
    about 1 when the palm faces the camera and about 0 when it is edge-on.
    Returns None for degenerate (collinear) landmarks.

    >>> palm_facing_score((0, 0, 0), (1, 0, 0), (0, 1, 0))
    1.0
    >>> palm_facing_score((0, 0, 0), (1, 0, 0), (0, 0, 1))
    0.0
    >>> palm_facing_score((0, 0, 0), (1, 0, 0), (2, 0, 0)) is None
    True
    """
    normal = calculate_palm_normal(wrist, index_mcp, pinky_mcp)
    magnitude = float(np.linalg.norm(normal))
    if magnitude < 1e-6:
        return None
    return float(clamp(abs(normal[2] / magnitude), 0.0, 1.0))


def pinch_ratio(hand: HandObservation) -> Optional[float]:
    """
    Thumb-index distance normalized by hand size (wrist to palm distance).

    A tracker-supplied ratio wins. Returns None when a needed point is missing.

    >>> hand = HandObservation(
    ...     wrist=(0.5, 0.8), palm=(0.5, 0.6), thumb_tip=(0.4, 0.5), index_tip=(0.5, 0.5)
    ... )
    >>> round(pinch_ratio(hand), 6)
    0.5
    """
    if hand.pinch_ratio is not None:
        return hand.pinch_ratio
    if None in (hand.thumb_tip, hand.index_tip, hand.wrist, hand.palm):
        return None
    scale = max(MIN_HAND_SCALE, calculate_euclidean_distance(hand.wrist, hand.palm))
    return calculate_euclidean_distance(hand.thumb_tip, hand.index_tip) / scale


def hand_height(hand: HandObservation) -> Optional[float]:
    """Height of the hand in [0, 1], 1 at the top of the image."""
    point = hand.wrist or hand.palm
    if point is None:
        return None
    return clamp(1 - point[1], 0.0, 1.0)


# -------------------------------------------------------------------------------
# Tracker adapters
# -------------------------------------------------------------------------------


def _xy(landmark) -> Point:
    return (float(landmark.x), float(landmark.y))


def _xyz(landmark) -> Tuple[float, float, float]:
    return (float(landmark.x), float(landmark.y), float(landmark.z))


def observation_from_landmarks(
    landmarks: Sequence, *, handedness=None, world_landmarks: Sequence = None
) -> HandObservation:
    """
    Build an observation from a list of 21 MediaPipe-style landmarks
    (objects with ``x``, ``y`` and ``z``).

    Palm facing is computed from ``world_landmarks`` when given, as the world
    frame gives a stable 3-D estimate of palm orientation.
    """

    def point(idx):
        return _xy(landmarks[idx]) if idx < len(landmarks) else None

    palm_facing = None
    if world_landmarks is not None and len(world_landmarks) > HandLandmark.PINKY_MCP:
        palm_facing = palm_facing_score(
            _xyz(world_landmarks[HandLandmark.WRIST]),
            _xyz(world_landmarks[HandLandmark.INDEX_FINGER_MCP]),
            _xyz(world_landmarks[HandLandmark.PINKY_MCP]),
        )

    return HandObservation(
        handedness=handedness,
        palm=point(HandLandmark.MIDDLE_FINGER_MCP),
        wrist=point(HandLandmark.WRIST),
        thumb_tip=point(HandLandmark.THUMB_TIP),
        index_tip=point(HandLandmark.INDEX_FINGER_TIP),
        palm_facing=palm_facing,
    )


def observations_from_mediapipe(hand_detection) -> Tuple[HandObservation, ...]:
    """
    Read a MediaPipe Hands result into observations.

    Args:
        hand_detection: MediaPipe hand detection results (anything with
            ``multi_hand_landmarks`` and, optionally, ``multi_handedness`` and
            ``multi_hand_world_landmarks``)

    Returns:
        tuple: One HandObservation per detected hand
    """
    multi_landmarks = getattr(hand_detection, 'multi_hand_landmarks', None)
    if not multi_landmarks:
        return ()
    multi_handedness = getattr(hand_detection, 'multi_handedness', None) or []
    multi_world = getattr(hand_detection, 'multi_hand_world_landmarks', None) or []

    hands = []
    for idx, hand_landmarks in enumerate(multi_landmarks):
        landmarks = hand_landmarks.landmark
        if not landmarks:
            continue
        handedness = None
        if idx < len(multi_handedness):
            handedness = multi_handedness[idx].classification[0].label
        world = multi_world[idx].landmark if idx < len(multi_world) else None
        hands.append(
            observation_from_landmarks(
                landmarks, handedness=handedness, world_landmarks=world
            )
        )
    return tuple(hands)


def observation_from_native(data: dict) -> HandObservation:
    """
    Map a depth-camera plugin hand record to an observation.

    The plugin reports ``distanceMeters <= 0`` and ``palmFacing < 0`` when it has
    no estimate.

    >>> hand = observation_from_native({
    ...     'handedness': 'Right', 'wristX': 0.5, 'wristY': 0.8,
    ...     'middleMcpX': 0.5, 'middleMcpY': 0.6, 'distanceMeters': -1,
    ...     'pinchRatio': 0.4, 'palmFacing': 0.9,
    ... })
    >>> hand.handedness, hand.palm, hand.depth_m, hand.pinch_ratio
    ('right', (0.5, 0.6), None, 0.4)
    """

    def point(prefix):
        x, y = data.get(f'{prefix}X'), data.get(f'{prefix}Y')
        if x is None or y is None:
            return None
        return (float(x), float(y))

    distance = data.get('distanceMeters')
    palm_facing = data.get('palmFacing')
    ratio = data.get('pinchRatio')
    return HandObservation(
        handedness=data.get('handedness'),
        palm=point('middleMcp'),
        wrist=point('wrist'),
        thumb_tip=point('thumbTip'),
        index_tip=point('indexTip'),
        palm_facing=(
            clamp(float(palm_facing), 0.0, 1.0)
            if palm_facing is not None and palm_facing >= 0
            else None
        ),
        depth_m=float(distance) if distance is not None and distance > 0 else None,
        pinch_ratio=float(ratio) if ratio is not None else None,
    )


def frame_from_native(update: dict, *, timestamp=None) -> LandmarkFrame:
    """Build a frame from a depth-camera plugin update (``{'hands': [...]}``)."""
    hands = update.get('hands') or []
    return LandmarkFrame(
        hands=tuple(observation_from_native(h) for h in hands), timestamp=timestamp
    )


def frame_from_mediapipe(hand_detection, *, timestamp=None, image_size=None):
    """Build a frame from a MediaPipe Hands result."""
    return LandmarkFrame(
        hands=observations_from_mediapipe(hand_detection),
        timestamp=timestamp,
        image_size=image_size,
    )
