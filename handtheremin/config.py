"""
Configuration for the gesture interpreter.

All knobs are plain numbers with documented valid ranges. Defaults are the
``DFLT_*`` constants below (desktop tuning); ``MOBILE_*`` constants hold the
values that differ for phones, whose front cameras are wider and whose tracking
is noisier.

Settings are grouped in small dataclasses, gathered by ``InterpreterConfig``:

>>> config = InterpreterConfig()
>>> config.zones.pad_enter_m, config.zones.pad_exit_m
(0.3, 0.32)
>>> preset_config('mobile').safety.lost_frames_to_release
4
"""

from dataclasses import dataclass, field, fields, asdict, replace
from typing import Tuple

from handtheremin.util import resolve_object

# -------------------------------------------------------------------------------
# Defaults
# -------------------------------------------------------------------------------

# Zones (meters). Pad exit > pad enter gives hysteresis.
DFLT_PAD_ENTER_M = 0.30
DFLT_PAD_EXIT_M = 0.32
DFLT_POINTER_MAX_M = 0.60
MOBILE_POINTER_MAX_M = 0.50

# Depth from 2-D landmarks: approx wrist -> middle MCP length of an adult hand.
DFLT_HAND_REFERENCE_LENGTH_M = 0.07
DFLT_CAMERA_FOV_DEG = 60.0
MOBILE_CAMERA_FOV_DEG = 80.0

# Part of the (mirrored) camera view mapped to the full control surface.
DFLT_ACTIVE_MAPPING_SCALE = 0.6
DFLT_ACTIVE_MAPPING_CENTER = (0.6, 0.55)

# EMA coefficients (0 < alpha <= 1). Higher = snappier, lower = steadier.
DFLT_POSITION_ALPHA = 0.35
DFLT_PALM_ALPHA = 0.25
DFLT_RESONANCE_ALPHA = 0.25
DFLT_REVERB_ALPHA = 0.25
DFLT_DEPTH_ALPHA = 0.4
MOBILE_DEPTH_ALPHA = 0.25
DFLT_VELOCITY_ALPHA = 0.5
MOBILE_VELOCITY_ALPHA = 0.3
DFLT_PINCH_ALPHA = 1.0

# Pluck: a quick thumb-index pinch while hovering.
DFLT_PLUCK_CLOSED_RATIO = 0.30
DFLT_PLUCK_REARM_RATIO = 0.55
DFLT_PLUCK_CLOSE_MIN_PER_S = 0.5
DFLT_PLUCK_CLOSE_MAX_PER_S = 4.0
DFLT_PLUCK_VELOCITY_CURVE = 0.4
DFLT_PLUCK_ATTACK_SLOW_S = 0.02
DFLT_PLUCK_ATTACK_FAST_S = 0.001
DFLT_PLUCK_RELEASE_S = 0.08
DFLT_PLUCK_MAX_DURATION_S = 0.6

# Pad: depth velocity (m/s) shapes attack on entry and release on exit.
DFLT_PAD_SPEED_MIN_M_PER_S = 0.05
DFLT_PAD_SPEED_MAX_M_PER_S = 1.0
DFLT_PAD_VELOCITY_CURVE = 0.5
DFLT_PAD_ATTACK_SLOW_S = 0.25
DFLT_PAD_ATTACK_FAST_S = 0.005
DFLT_PAD_RELEASE_SLOW_S = 0.6
DFLT_PAD_RELEASE_FAST_S = 0.05

# Safety
DFLT_LOST_FRAMES_TO_RELEASE = 6
MOBILE_LOST_FRAMES_TO_RELEASE = 4
DFLT_STALE_UPDATE_TIMEOUT_S = 0.2
DFLT_STUCK_VOICE_TIMEOUT_S = 1.5
DFLT_RELEASE_S = DFLT_PLUCK_RELEASE_S

# Reverb from pinch openness.
DFLT_REVERB_PINCH_MIN = 0.25
DFLT_REVERB_PINCH_MAX = 0.9
DFLT_REVERB_MAX_WET = 0.85
DFLT_REVERB_DRY_DUCK = 0.4
DFLT_REVERB_EPSILON = 0.01

# Hand motion while a voice sounds: shake from acceleration, vibrato rate from
# how often the hand turns around.
DFLT_SHAKE_SENSITIVITY = 6.0
MIN_SHAKE_SENSITIVITY = 0.5
MAX_SHAKE_SENSITIVITY = 12.0
DFLT_SHAKE_ALPHA = 0.25
DFLT_VIBRATO_MIN_AMPLITUDE = 0.008
DFLT_VIBRATO_MIN_HALF_PERIOD_S = 0.04
DFLT_VIBRATO_MAX_HALF_PERIOD_S = 0.5
DFLT_VIBRATO_ALPHA = 0.2
DFLT_VIBRATO_TIMEOUT_S = 0.55
DFLT_MOTION_MAX_GAP_S = 0.25

# Role stickiness (off: roles are recomputed from scratch every frame).
DFLT_ROLE_STICKINESS = False
DFLT_ROLE_STICKINESS_RADIUS = 0.15


class InvalidConfigError(ValueError):
    """Raised when a configuration knob is outside its valid range."""


# -------------------------------------------------------------------------------
# Config sections
# -------------------------------------------------------------------------------


@dataclass(frozen=True)
class ZoneConfig:
    """Depth zones, depth estimation and the view-to-surface mapping."""

    pad_enter_m: float = DFLT_PAD_ENTER_M
    pad_exit_m: float = DFLT_PAD_EXIT_M
    pointer_max_m: float = DFLT_POINTER_MAX_M
    camera_fov_deg: float = DFLT_CAMERA_FOV_DEG
    hand_reference_length_m: float = DFLT_HAND_REFERENCE_LENGTH_M
    active_mapping_scale: float = DFLT_ACTIVE_MAPPING_SCALE
    active_mapping_center: Tuple[float, float] = DFLT_ACTIVE_MAPPING_CENTER
    mirror_x: bool = True

    def validate(self):
        _check(0 < self.pad_enter_m, 'pad_enter_m must be positive')
        _check(
            self.pad_enter_m < self.pad_exit_m,
            'pad_exit_m must be greater than pad_enter_m',
        )
        _check(
            self.pad_exit_m <= self.pointer_max_m,
            'pointer_max_m must be at least pad_exit_m',
        )
        _check(
            20 <= self.camera_fov_deg <= 140,
            'camera_fov_deg must be within [20, 140]',
        )
        _check(
            self.hand_reference_length_m > 0,
            'hand_reference_length_m must be positive',
        )
        _check(
            0.1 <= self.active_mapping_scale <= 1.0,
            'active_mapping_scale must be within [0.1, 1]',
        )
        _check(
            len(self.active_mapping_center) == 2
            and all(0 <= c <= 1 for c in self.active_mapping_center),
            'active_mapping_center must be an (x, y) pair within [0, 1]',
        )


@dataclass(frozen=True)
class SmoothingConfig:
    """Per-signal EMA coefficients, each within (0, 1]."""

    position_alpha: float = DFLT_POSITION_ALPHA
    palm_alpha: float = DFLT_PALM_ALPHA
    resonance_alpha: float = DFLT_RESONANCE_ALPHA
    reverb_alpha: float = DFLT_REVERB_ALPHA
    depth_alpha: float = DFLT_DEPTH_ALPHA
    velocity_alpha: float = DFLT_VELOCITY_ALPHA
    pinch_alpha: float = DFLT_PINCH_ALPHA

    def validate(self):
        for f in fields(self):
            alpha = getattr(self, f.name)
            _check(0 < alpha <= 1, f'{f.name} must be within (0, 1], got {alpha}')


@dataclass(frozen=True)
class PluckConfig:
    """Pinch-triggered transient notes."""

    closed_ratio: float = DFLT_PLUCK_CLOSED_RATIO
    rearm_ratio: float = DFLT_PLUCK_REARM_RATIO
    close_min_per_s: float = DFLT_PLUCK_CLOSE_MIN_PER_S
    close_max_per_s: float = DFLT_PLUCK_CLOSE_MAX_PER_S
    velocity_curve: float = DFLT_PLUCK_VELOCITY_CURVE
    attack_slow_s: float = DFLT_PLUCK_ATTACK_SLOW_S
    attack_fast_s: float = DFLT_PLUCK_ATTACK_FAST_S
    release_s: float = DFLT_PLUCK_RELEASE_S
    max_duration_s: float = DFLT_PLUCK_MAX_DURATION_S
    release_on_reopen: bool = True

    def validate(self):
        _check(self.closed_ratio > 0, 'closed_ratio must be positive')
        _check(
            self.rearm_ratio > self.closed_ratio,
            'rearm_ratio must be greater than closed_ratio',
        )
        _check(self.close_min_per_s >= 0, 'close_min_per_s must be non-negative')
        _check(
            self.close_max_per_s > self.close_min_per_s,
            'close_max_per_s must be greater than close_min_per_s',
        )
        _check(0 < self.velocity_curve <= 1, 'velocity_curve must be within (0, 1]')
        _check(
            0 <= self.attack_fast_s <= self.attack_slow_s,
            'attack times must satisfy 0 <= attack_fast_s <= attack_slow_s',
        )
        _check(self.release_s >= 0, 'release_s must be non-negative')
        _check(self.max_duration_s > 0, 'max_duration_s must be positive')


@dataclass(frozen=True)
class PadEnvelopeConfig:
    """Velocity-to-envelope shaping for the pad gesture."""

    speed_min_m_per_s: float = DFLT_PAD_SPEED_MIN_M_PER_S
    speed_max_m_per_s: float = DFLT_PAD_SPEED_MAX_M_PER_S
    velocity_curve: float = DFLT_PAD_VELOCITY_CURVE
    attack_slow_s: float = DFLT_PAD_ATTACK_SLOW_S
    attack_fast_s: float = DFLT_PAD_ATTACK_FAST_S
    release_slow_s: float = DFLT_PAD_RELEASE_SLOW_S
    release_fast_s: float = DFLT_PAD_RELEASE_FAST_S

    def validate(self):
        _check(self.speed_min_m_per_s >= 0, 'speed_min_m_per_s must be non-negative')
        _check(
            self.speed_max_m_per_s > self.speed_min_m_per_s,
            'speed_max_m_per_s must be greater than speed_min_m_per_s',
        )
        _check(0 < self.velocity_curve <= 1, 'velocity_curve must be within (0, 1]')
        _check(
            0 <= self.attack_fast_s <= self.attack_slow_s,
            'attack times must satisfy 0 <= attack_fast_s <= attack_slow_s',
        )
        _check(
            0 <= self.release_fast_s <= self.release_slow_s,
            'release times must satisfy 0 <= release_fast_s <= release_slow_s',
        )


@dataclass(frozen=True)
class SafetyConfig:
    """Frame-loss and watchdog limits that force a voice off."""

    lost_frames_to_release: int = DFLT_LOST_FRAMES_TO_RELEASE
    stale_update_timeout_s: float = DFLT_STALE_UPDATE_TIMEOUT_S
    stuck_voice_timeout_s: float = DFLT_STUCK_VOICE_TIMEOUT_S
    release_s: float = DFLT_RELEASE_S

    def validate(self):
        _check(
            self.lost_frames_to_release >= 1,
            'lost_frames_to_release must be at least 1',
        )
        _check(self.stale_update_timeout_s > 0, 'stale_update_timeout_s must be positive')
        _check(self.stuck_voice_timeout_s > 0, 'stuck_voice_timeout_s must be positive')
        _check(self.release_s >= 0, 'release_s must be non-negative')


@dataclass(frozen=True)
class ReverbConfig:
    """Pinch openness to reverb wetness."""

    pinch_min: float = DFLT_REVERB_PINCH_MIN
    pinch_max: float = DFLT_REVERB_PINCH_MAX
    max_wet: float = DFLT_REVERB_MAX_WET
    dry_duck: float = DFLT_REVERB_DRY_DUCK
    epsilon: float = DFLT_REVERB_EPSILON

    def validate(self):
        _check(self.pinch_max > self.pinch_min, 'pinch_max must be greater than pinch_min')
        _check(0 < self.max_wet <= 1, 'max_wet must be within (0, 1]')
        _check(0 <= self.dry_duck <= 1, 'dry_duck must be within [0, 1]')
        _check(0 <= self.epsilon < self.max_wet, 'epsilon must be within [0, max_wet)')


@dataclass(frozen=True)
class MotionConfig:
    """Shake and vibrato-rate tracking of the sounding hand."""

    shake_sensitivity: float = DFLT_SHAKE_SENSITIVITY
    shake_alpha: float = DFLT_SHAKE_ALPHA
    vibrato_min_amplitude: float = DFLT_VIBRATO_MIN_AMPLITUDE
    vibrato_min_half_period_s: float = DFLT_VIBRATO_MIN_HALF_PERIOD_S
    vibrato_max_half_period_s: float = DFLT_VIBRATO_MAX_HALF_PERIOD_S
    vibrato_alpha: float = DFLT_VIBRATO_ALPHA
    vibrato_timeout_s: float = DFLT_VIBRATO_TIMEOUT_S
    max_gap_s: float = DFLT_MOTION_MAX_GAP_S

    def validate(self):
        _check(
            MIN_SHAKE_SENSITIVITY <= self.shake_sensitivity <= MAX_SHAKE_SENSITIVITY,
            f'shake_sensitivity must be within '
            f'[{MIN_SHAKE_SENSITIVITY}, {MAX_SHAKE_SENSITIVITY}]',
        )
        for name in ('shake_alpha', 'vibrato_alpha'):
            alpha = getattr(self, name)
            _check(0 < alpha <= 1, f'{name} must be within (0, 1], got {alpha}')
        _check(self.vibrato_min_amplitude >= 0, 'vibrato_min_amplitude must be non-negative')
        _check(
            0 < self.vibrato_min_half_period_s < self.vibrato_max_half_period_s,
            'vibrato half periods must satisfy 0 < min < max',
        )
        _check(self.vibrato_timeout_s > 0, 'vibrato_timeout_s must be positive')
        _check(self.max_gap_s > 0, 'max_gap_s must be positive')


_SECTIONS = {
    'zones': ZoneConfig,
    'smoothing': SmoothingConfig,
    'pluck': PluckConfig,
    'pad': PadEnvelopeConfig,
    'safety': SafetyConfig,
    'reverb': ReverbConfig,
    'motion': MotionConfig,
}


@dataclass(frozen=True)
class InterpreterConfig:
    """Every knob of the gesture interpreter."""

    zones: ZoneConfig = field(default_factory=ZoneConfig)
    smoothing: SmoothingConfig = field(default_factory=SmoothingConfig)
    pluck: PluckConfig = field(default_factory=PluckConfig)
    pad: PadEnvelopeConfig = field(default_factory=PadEnvelopeConfig)
    safety: SafetyConfig = field(default_factory=SafetyConfig)
    reverb: ReverbConfig = field(default_factory=ReverbConfig)
    motion: MotionConfig = field(default_factory=MotionConfig)
    role_stickiness: bool = DFLT_ROLE_STICKINESS
    role_stickiness_radius: float = DFLT_ROLE_STICKINESS_RADIUS

    def validate(self) -> 'InterpreterConfig':
        """Check every section, raising ``InvalidConfigError`` on the first problem."""
        for name in _SECTIONS:
            getattr(self, name).validate()
        _check(
            self.role_stickiness_radius > 0, 'role_stickiness_radius must be positive'
        )
        return self

    def to_dict(self) -> dict:
        """Convert to a JSON-friendly dictionary."""
        d = asdict(self)
        d['zones']['active_mapping_center'] = list(self.zones.active_mapping_center)
        return d

    @classmethod
    def from_dict(cls, data: dict, *, base: 'InterpreterConfig' = None):
        """
        Create a config from a (possibly partial) dictionary.

        Missing keys keep the values of ``base`` (the defaults if not given).
        Unknown keys raise ``InvalidConfigError``.

        >>> c = InterpreterConfig.from_dict({'zones': {'pad_enter_m': 0.25}})
        >>> c.zones.pad_enter_m, c.zones.pad_exit_m
        (0.25, 0.32)
        """
        base = base or cls()
        top_level = {}
        for key, value in data.items():
            if key in _SECTIONS:
                if not isinstance(value, dict):
                    raise InvalidConfigError(f"Settings for {key} must be a mapping")
                section = getattr(base, key)
                known = {f.name for f in fields(section)}
                unknown = set(value) - known
                if unknown:
                    raise InvalidConfigError(
                        f"Unknown {key} settings: {', '.join(sorted(unknown))}"
                    )
                if 'active_mapping_center' in value:
                    value = dict(
                        value,
                        active_mapping_center=tuple(value['active_mapping_center']),
                    )
                top_level[key] = replace(section, **value)
            elif key in ('role_stickiness', 'role_stickiness_radius'):
                top_level[key] = value
            else:
                raise InvalidConfigError(f"Unknown setting: {key}")
        return replace(base, **top_level).validate()


def _check(condition, message):
    if not condition:
        raise InvalidConfigError(message)


# -------------------------------------------------------------------------------
# Platform presets
# -------------------------------------------------------------------------------


def desktop_config() -> InterpreterConfig:
    """Laptop/desktop webcam tuning (the defaults)."""
    return InterpreterConfig()


def mobile_config() -> InterpreterConfig:
    """Phone front-camera tuning: wider FOV, closer use, jittery tracking."""
    return InterpreterConfig(
        zones=ZoneConfig(
            pointer_max_m=MOBILE_POINTER_MAX_M, camera_fov_deg=MOBILE_CAMERA_FOV_DEG
        ),
        smoothing=SmoothingConfig(
            depth_alpha=MOBILE_DEPTH_ALPHA, velocity_alpha=MOBILE_VELOCITY_ALPHA
        ),
        safety=SafetyConfig(lost_frames_to_release=MOBILE_LOST_FRAMES_TO_RELEASE),
    )


config_presets = {
    'desktop': desktop_config,
    'mobile': mobile_config,
}


def preset_config(preset='desktop') -> InterpreterConfig:
    """Get a config by preset name (or pass a preset function through)."""
    return resolve_object(preset, object_map=config_presets)()
