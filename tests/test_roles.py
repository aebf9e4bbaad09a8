"""Tests for hand role assignment."""

from handtheremin.hand_features import HandObservation
from handtheremin.roles import RoleAssigner, assign_roles


def hand(x, handedness=None):
    return HandObservation(handedness=handedness, palm=(x, 0.5))


class TestAssignRoles:
    """Tests for per-frame role assignment."""

    def test_no_hands(self):
        assert assign_roles([]) == (None, None)

    def test_labels_decide(self):
        left, right = hand(0.8, 'Left'), hand(0.2, 'Right')
        # labels win over positions
        assert assign_roles([left, right]) == (left, right)

    def test_lone_right_hand_sounds(self):
        right = hand(0.5, 'Right')
        assert assign_roles([right]) == (None, right)

    def test_lone_left_hand_filters(self):
        left = hand(0.5, 'Left')
        assert assign_roles([left]) == (left, None)

    def test_lone_unlabeled_hand_sounds(self):
        lone = hand(0.1)
        assert assign_roles([lone]) == (None, lone)

    def test_unlabeled_pair_split_by_position(self):
        a, b = hand(0.7), hand(0.3)
        assert assign_roles([a, b]) == (b, a)

    def test_unassigned_hand_fills_empty_role(self):
        right, unknown = hand(0.2, 'Right'), hand(0.8)
        assert assign_roles([right, unknown]) == (unknown, right)
        left, unknown = hand(0.8, 'Left'), hand(0.2)
        assert assign_roles([left, unknown]) == (left, unknown)

    def test_duplicate_labels(self):
        r1, r2 = hand(0.3, 'Right'), hand(0.7, 'Right')
        assert assign_roles([r1, r2]) == (r2, r1)

    def test_unlabeled_pair_ordered_by_wrist(self):
        # palms cross over (tilted hands) but the wrists do not
        a = HandObservation(wrist=(0.6, 0.8), palm=(0.3, 0.6))
        b = HandObservation(wrist=(0.4, 0.8), palm=(0.7, 0.6))
        assert assign_roles([a, b]) == (b, a)

    def test_palm_fallback_for_ordering(self):
        a, b = hand(0.9), hand(0.1)
        assert assign_roles([a, b]) == (b, a)

    def test_deterministic(self):
        hands = [hand(0.6), hand(0.4, 'Left'), hand(0.5)]
        assert assign_roles(hands) == assign_roles(list(hands))


class TestRoleAssigner:
    """Tests for role stickiness across frames."""

    def test_without_stickiness_labels_flip_roles(self):
        assigner = RoleAssigner()
        assigner([hand(0.2, 'Left'), hand(0.8, 'Right')])
        a, b = hand(0.2, 'Right'), hand(0.8, 'Left')
        assert assigner([a, b]) == (b, a)

    def test_stickiness_keeps_roles_on_label_flip(self):
        assigner = RoleAssigner(stickiness=True)
        assigner([hand(0.2, 'Left'), hand(0.8, 'Right')])
        a, b = hand(0.22, 'Right'), hand(0.78, 'Left')
        assert assigner([a, b]) == (a, b)

    def test_lone_hand_keeps_nearby_role(self):
        assigner = RoleAssigner(stickiness=True, radius=0.1)
        assigner([hand(0.2, 'Left'), hand(0.8, 'Right')])
        mislabeled = hand(0.78, 'Left')
        assert assigner([mislabeled]) == (None, mislabeled)

    def test_lone_hand_far_from_roles_follows_label(self):
        assigner = RoleAssigner(stickiness=True, radius=0.1)
        assigner([hand(0.2, 'Left'), hand(0.8, 'Right')])
        left = hand(0.5, 'Left')
        assert assigner([left]) == (left, None)

    def test_reset_forgets_positions(self):
        assigner = RoleAssigner(stickiness=True)
        assigner([hand(0.2, 'Left'), hand(0.8, 'Right')])
        assigner.reset()
        a, b = hand(0.2, 'Right'), hand(0.8, 'Left')
        assert assigner([a, b]) == (b, a)
