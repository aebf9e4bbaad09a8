"""Utility functions for running the interpreter from scripts: session replay and CLI."""

import json
import logging
from typing import Callable, Iterable, Iterator, Optional, Union

from handtheremin.config import InterpreterConfig, config_presets, preset_config
from handtheremin.events import EventRecorder, OutputAdapter, event_to_dict
from handtheremin.hand_features import HandObservation, LandmarkFrame
from handtheremin.interpreter import GestureInterpreter
from handtheremin.util import return_none as do_nothing

logger = logging.getLogger(__name__)

DFLT_LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'

HAND_POINTS = ('wrist', 'palm', 'thumb_tip', 'index_tip')
HAND_VALUES = ('depth_m', 'palm_facing', 'pinch_ratio')


# -------------------------------------------------------------------------------
# Logging utilities
# -------------------------------------------------------------------------------


def setup_logging(level: Union[str, int] = 'WARNING', fmt: str = DFLT_LOG_FORMAT):
    """Configure the root logger (level given by name or number)."""
    if isinstance(level, str):
        level = level.upper()
    logging.basicConfig(level=level, format=fmt)


def print_json_if_possible(x):
    """Prints the input as JSON if it can be serialized, as is otherwise."""
    try:
        x = json.dumps(x)
    except (TypeError, ValueError):
        pass
    print(x)


# -------------------------------------------------------------------------------
# Session files (JSON lines, one frame per line)
# -------------------------------------------------------------------------------


class SessionFormatError(ValueError):
    """Raised when a recorded session line can't be read as a frame."""


def _point(value, name):
    if value is None:
        return None
    if not isinstance(value, (list, tuple)) or len(value) < 2:
        raise SessionFormatError(f"{name} should be an [x, y] pair, got {value!r}")
    return (float(value[0]), float(value[1]))


def hand_from_dict(d: dict) -> HandObservation:
    if not isinstance(d, dict):
        raise SessionFormatError(f"A hand should be a mapping, got {d!r}")
    kwargs = {name: _point(d.get(name), name) for name in HAND_POINTS}
    for name in HAND_VALUES:
        if d.get(name) is not None:
            try:
                kwargs[name] = float(d[name])
            except (TypeError, ValueError) as e:
                raise SessionFormatError(f"Invalid {name}: {d[name]!r}") from e
    return HandObservation(handedness=d.get('handedness'), **kwargs)


def hand_to_dict(hand: HandObservation) -> dict:
    d = {'handedness': hand.handedness}
    for name in HAND_POINTS + HAND_VALUES:
        value = getattr(hand, name)
        if value is not None:
            d[name] = list(value) if isinstance(value, tuple) else value
    return d


def frame_from_dict(d: dict) -> Optional[LandmarkFrame]:
    """
    Make a frame from its session-file form.

    ``"hands": null`` (or no ``hands`` key) is the explicit "no hands" marker,
    which gives ``None``.

    >>> frame = frame_from_dict({'t': 0.5, 'hands': [{'handedness': 'Right', 'palm': [0.4, 0.5]}]})
    >>> frame.timestamp, frame.hands[0].handedness, frame.hands[0].palm
    (0.5, 'right', (0.4, 0.5))
    >>> frame_from_dict({'t': 0.5, 'hands': None}) is None
    True
    """
    if not isinstance(d, dict):
        raise SessionFormatError(f"A frame should be a mapping, got {d!r}")
    if 't' not in d:
        raise SessionFormatError(f"A frame needs a timestamp ('t'): {d!r}")
    try:
        timestamp = float(d['t'])
    except (TypeError, ValueError) as e:
        raise SessionFormatError(f"Invalid timestamp: {d['t']!r}") from e
    hands = d.get('hands')
    if hands is None:
        return None
    image_size = d.get('image_size')
    if image_size is not None:
        if not isinstance(image_size, (list, tuple)) or len(image_size) != 2:
            raise SessionFormatError(f"image_size should be [width, height]: {image_size!r}")
        image_size = (int(image_size[0]), int(image_size[1]))
    if not isinstance(hands, (list, tuple)):
        raise SessionFormatError(f"hands should be a list, got {hands!r}")
    return LandmarkFrame(
        hands=tuple(hand_from_dict(h) for h in hands),
        timestamp=timestamp,
        image_size=image_size,
    )


def frame_to_dict(frame: Optional[LandmarkFrame], *, timestamp=None) -> dict:
    """Session-file form of a frame (``None`` frames need an explicit timestamp)."""
    if frame is None:
        return {'t': timestamp, 'hands': None}
    d = {'t': frame.timestamp, 'hands': [hand_to_dict(h) for h in frame.hands]}
    if frame.image_size is not None:
        d['image_size'] = list(frame.image_size)
    return d


def read_session(lines: Union[str, Iterable[str]]) -> Iterator[tuple]:
    """
    Read a session, yielding ``(timestamp, frame)`` pairs (``frame`` may be None).

    Args:
        lines: A file path, or an iterable of JSON lines. Blank lines are skipped.

    Raises:
        SessionFormatError: On a line that is not a valid frame
    """
    if isinstance(lines, str):
        with open(lines) as f:
            yield from read_session(f)
        return
    for line_number, line in enumerate(lines, 1):
        line = line.strip()
        if not line:
            continue
        try:
            d = json.loads(line)
        except json.JSONDecodeError as e:
            raise SessionFormatError(f"Line {line_number}: invalid JSON ({e})") from e
        try:
            frame = frame_from_dict(d)
        except SessionFormatError as e:
            raise SessionFormatError(f"Line {line_number}: {e}") from e
        yield float(d['t']), frame


def write_session(frames: Iterable[tuple], filepath: str):
    """Write ``(timestamp, frame)`` pairs as a session file."""
    with open(filepath, 'w') as f:
        for timestamp, frame in frames:
            f.write(json.dumps(frame_to_dict(frame, timestamp=timestamp)) + '\n')


# -------------------------------------------------------------------------------
# Main run function
# -------------------------------------------------------------------------------


def run_session(
    frames: Iterable[tuple],
    interpreter: GestureInterpreter,
    adapter: Callable,
    *,
    log_events: Optional[Callable] = None,
) -> int:
    """
    Drive ``interpreter`` with ``(timestamp, frame)`` pairs, dispatching the
    events through ``adapter``. The interpreter is always torn down at the end,
    even if reading the frames fails.

    Args:
        frames: ``(timestamp, frame)`` pairs, as yielded by ``read_session``
        interpreter: The interpreter to drive
        adapter: Called with each batch of events (typically an ``OutputAdapter``)
        log_events: Called with the dict form of each event (or None to disable)

    Returns:
        int: The number of frames processed
    """
    log_events = log_events or do_nothing
    n_frames = 0

    def dispatch(events):
        for event in events:
            log_events(event_to_dict(event))
        adapter(events)

    try:
        for timestamp, frame in frames:
            dispatch(interpreter.update(frame, now=timestamp))
            n_frames += 1
    finally:
        dispatch(interpreter.teardown())
    return n_frames


def resolve_config(preset: str = 'desktop', config: Optional[str] = None):
    """Get a preset config, optionally overridden by a JSON string or file."""
    base = preset_config(preset)
    if not config:
        return base
    if config.lstrip().startswith('{'):
        overrides = json.loads(config)
    else:
        with open(config) as f:
            overrides = json.load(f)
    return InterpreterConfig.from_dict(overrides, base=base)


def replay(
    session: str,
    *,
    preset: str = 'desktop',
    config: str = None,
    log_events: bool = False,
    log_level: str = 'WARNING',
):
    """
    Replay a recorded session through the gesture interpreter.

    Args:
        session: Path to a session file (JSON lines, one frame per line)
        preset: Platform preset ('desktop' or 'mobile')
        config: JSON settings overriding the preset (inline, or a file path)
        log_events: Print every event as JSON
        log_level: Logging level (DEBUG shows gesture phase transitions)
    """
    setup_logging(log_level)
    interpreter = GestureInterpreter(resolve_config(preset, config))
    recorder = EventRecorder()
    n_frames = run_session(
        read_session(session),
        interpreter,
        OutputAdapter(recorder, recorder),
        log_events=print_json_if_possible if log_events else None,
    )
    summary = {
        'frames': n_frames,
        'note_on': recorder.count('note_on'),
        'note_off': recorder.count('note_off'),
    }
    logger.info(f"Replayed {n_frames} frames from {session}")
    print_json_if_possible(summary)


def presets():
    """List the available platform presets, with their settings."""
    for name in sorted(config_presets):
        print(f"{name}:")
        print_json_if_possible(config_presets[name]().to_dict())
