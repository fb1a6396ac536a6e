"""Tests for the swipe-to-delete gesture state machine."""

from __future__ import annotations

import pytest

from spoonjoy.shopping.swipe import (
    SwipeAction,
    SwipeState,
    SwipeTracker,
    next_swipe_state,
    resolve_swipe_action,
    should_delete_on_swipe,
)


@pytest.mark.parametrize(
    ("offset", "is_revealed", "expected"),
    [
        (-56, False, SwipeAction.REVEAL),
        (-120, False, SwipeAction.REVEAL),
        (-55.9, False, SwipeAction.NONE),
        (40, False, SwipeAction.NONE),
        (-56, True, SwipeAction.CONFIRM_DELETE),
        (28, True, SwipeAction.DISMISS),
        (27.9, True, SwipeAction.NONE),
        (-10, True, SwipeAction.NONE),
    ],
)
def test_resolve_swipe_action_thresholds(offset, is_revealed, expected):
    assert resolve_swipe_action(offset, is_revealed) is expected


def test_delete_requires_prior_reveal():
    assert should_delete_on_swipe(-200, False) is False
    assert should_delete_on_swipe(-200, True) is True


def test_state_machine_transitions():
    state, action = next_swipe_state(SwipeState.IDLE, -60)
    assert (state, action) == (SwipeState.REVEALED, SwipeAction.REVEAL)

    state, action = next_swipe_state(state, 30)
    assert (state, action) == (SwipeState.IDLE, SwipeAction.DISMISS)

    state, _ = next_swipe_state(state, -60)
    state, action = next_swipe_state(state, -60)
    assert (state, action) == (SwipeState.DELETED, SwipeAction.CONFIRM_DELETE)

    assert next_swipe_state(state, -60) == (SwipeState.DELETED, SwipeAction.NONE)


def test_tracker_deletes_after_two_left_swipes():
    tracker = SwipeTracker([1, 2, 3])

    assert tracker.handle_drag(2, -70) is SwipeAction.REVEAL
    assert tracker.is_revealed(2) is True
    assert tracker.handle_drag(2, -70) is SwipeAction.CONFIRM_DELETE
    assert tracker.state(2) is SwipeState.DELETED
    assert tracker.deleted_ids() == (2,)
    assert tracker.handle_drag(99, -70) is SwipeAction.NONE


def test_tracker_resets_reveals_when_rows_change():
    tracker = SwipeTracker([1, 2, 3])
    tracker.handle_drag(1, -70)

    assert tracker.sync([1, 2, 3]) is False
    assert tracker.is_revealed(1) is True

    assert tracker.sync([2, 1, 3]) is True
    assert tracker.is_revealed(1) is False
    assert tracker.state(1) is SwipeState.IDLE


def test_dismiss_all_closes_every_reveal():
    tracker = SwipeTracker(["a", "b"])
    tracker.handle_drag("a", -60)
    tracker.handle_drag("b", -60)

    tracker.dismiss_all()

    assert not tracker.is_revealed("a")
    assert not tracker.is_revealed("b")
