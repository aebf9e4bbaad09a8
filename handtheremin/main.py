#!/usr/bin/env python
"""
Command-line interface for handtheremin.

Examples:
    # Replay a recorded session with the desktop settings
    handtheremin replay session.jsonl

    # Phone tuning, printing every event, with a setting override
    handtheremin replay session.jsonl --preset mobile --log-events \\
        --config '{"zones": {"pad_enter_m": 0.25, "pad_exit_m": 0.28}}'

    # Show the gesture phase transitions
    handtheremin replay session.jsonl --log-level DEBUG

    # List the platform presets
    handtheremin presets
"""

import argh

from handtheremin.script_utils import presets, replay


def main():
    argh.dispatch_commands([replay, presets])


if __name__ == "__main__":
    main()
