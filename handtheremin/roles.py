"""Which hand plays which role: the left hand shapes the filter, the right one sounds."""

import logging
from typing import Optional, Sequence, Tuple

from handtheremin.hand_features import LEFT, RIGHT, HandObservation

logger = logging.getLogger(__name__)

FILTER, SOUND = 'filter', 'sound'

Roles = Tuple[Optional[HandObservation], Optional[HandObservation]]


def _x(hand: HandObservation) -> float:
    x = hand.anchor_x
    return 0.0 if x is None else x


def assign_roles(hands: Sequence[HandObservation]) -> Roles:
    """
    Split the hands of a frame into ``(filter_hand, sound_hand)``.

    Labeled hands go to their role (left -> filter, right -> sound). Hands the
    tracker could not label fill the roles left empty, in left to right order.
    With no labels at all, a lone hand plays sound and two hands are split by
    position: leftmost on filter, rightmost on sound.

    >>> left = HandObservation(handedness='Left', palm=(0.2, 0.5))
    >>> right = HandObservation(handedness='Right', palm=(0.8, 0.5))
    >>> assign_roles([right, left]) == (left, right)
    True
    >>> lone = HandObservation(palm=(0.3, 0.5))
    >>> assign_roles([lone]) == (None, lone)
    True
    """
    filter_hand = sound_hand = None
    unassigned = []
    for hand in hands:
        if hand.handedness == LEFT and filter_hand is None:
            filter_hand = hand
        elif hand.handedness == RIGHT and sound_hand is None:
            sound_hand = hand
        else:
            unassigned.append(hand)

    if not unassigned:
        return filter_hand, sound_hand

    if filter_hand is None and sound_hand is None and len(unassigned) == 1:
        return None, unassigned[0]

    unassigned.sort(key=_x)
    if filter_hand is None:
        filter_hand = unassigned.pop(0)
    if sound_hand is None and unassigned:
        sound_hand = unassigned.pop()
    return filter_hand, sound_hand


class RoleAssigner:
    """
    ``assign_roles`` with optional stickiness across frames.

    Without stickiness, roles are recomputed from scratch every frame (a
    tracker label flip swaps the roles right away). With it, roles that would
    swap against the hands' positions in the previous frame keep their previous
    assignment, and a lone hand close to where a role was stays in that role.

    >>> assigner = RoleAssigner(stickiness=True, radius=0.15)
    >>> a = HandObservation(handedness='Left', palm=(0.2, 0.5))
    >>> b = HandObservation(handedness='Right', palm=(0.8, 0.5))
    >>> assigner([a, b]) == (a, b)
    True
    >>> flipped_a = HandObservation(handedness='Right', palm=(0.21, 0.5))
    >>> flipped_b = HandObservation(handedness='Left', palm=(0.79, 0.5))
    >>> assigner([flipped_a, flipped_b]) == (flipped_a, flipped_b)
    True
    """

    def __init__(self, *, stickiness: bool = False, radius: float = 0.15):
        self.stickiness = stickiness
        self.radius = radius
        self.reset()

    def reset(self):
        self._last_x = {FILTER: None, SOUND: None}

    def __call__(self, hands: Sequence[HandObservation]) -> Roles:
        filter_hand, sound_hand = assign_roles(hands)
        if self.stickiness:
            filter_hand, sound_hand = self._stick(filter_hand, sound_hand)
        self._last_x = {
            FILTER: None if filter_hand is None else filter_hand.anchor_x,
            SOUND: None if sound_hand is None else sound_hand.anchor_x,
        }
        return filter_hand, sound_hand

    def _stick(self, filter_hand, sound_hand) -> Roles:
        last_filter, last_sound = self._last_x[FILTER], self._last_x[SOUND]
        if filter_hand is not None and sound_hand is not None:
            if None in (last_filter, last_sound):
                return filter_hand, sound_hand
            fx, sx = filter_hand.anchor_x, sound_hand.anchor_x
            if fx is None or sx is None:
                return filter_hand, sound_hand
            kept = abs(fx - last_filter) + abs(sx - last_sound)
            swapped = abs(sx - last_filter) + abs(fx - last_sound)
            if swapped < kept:
                logger.debug("Role swap suppressed (hands did not cross)")
                return sound_hand, filter_hand
            return filter_hand, sound_hand

        hand = filter_hand if filter_hand is not None else sound_hand
        if hand is None or hand.anchor_x is None:
            return filter_hand, sound_hand
        current_role = FILTER if filter_hand is not None else SOUND
        other_role = SOUND if current_role == FILTER else FILTER
        other_x, current_x = self._last_x[other_role], self._last_x[current_role]
        if other_x is None or abs(hand.anchor_x - other_x) > self.radius:
            return filter_hand, sound_hand
        if current_x is not None and abs(hand.anchor_x - current_x) <= abs(
            hand.anchor_x - other_x
        ):
            return filter_hand, sound_hand
        logger.debug(f"Lone hand kept in the {other_role} role")
        return (hand, None) if other_role == FILTER else (None, hand)
