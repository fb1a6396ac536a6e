"""Swipe-to-delete gesture interpretation for shopping list rows."""

from __future__ import annotations

import logging
from enum import Enum
from typing import Dict, Hashable, Iterable, Tuple

logger = logging.getLogger(__name__)

REVEAL_THRESHOLD = -56.0
CONFIRM_DELETE_THRESHOLD = -56.0
DISMISS_THRESHOLD = 28.0


class SwipeAction(str, Enum):
    REVEAL = "reveal"
    CONFIRM_DELETE = "confirmDelete"
    DISMISS = "dismiss"
    NONE = "none"


class SwipeState(str, Enum):
    IDLE = "idle"
    REVEALED = "revealed"
    DELETED = "deleted"


def resolve_swipe_action(offset: float, is_revealed: bool) -> SwipeAction:
    """Map a horizontal drag offset and reveal state to an intent.

    Deleting is progressive: the first left swipe reveals the action and only a
    further left swipe from the revealed state confirms it.
    """

    if is_revealed:
        if offset <= CONFIRM_DELETE_THRESHOLD:
            return SwipeAction.CONFIRM_DELETE
        if offset >= DISMISS_THRESHOLD:
            return SwipeAction.DISMISS
        return SwipeAction.NONE
    if offset <= REVEAL_THRESHOLD:
        return SwipeAction.REVEAL
    return SwipeAction.NONE


def should_delete_on_swipe(offset: float, is_revealed: bool) -> bool:
    return resolve_swipe_action(offset, is_revealed) is SwipeAction.CONFIRM_DELETE


def next_swipe_state(state: SwipeState, offset: float) -> Tuple[SwipeState, SwipeAction]:
    if state is SwipeState.DELETED:
        return state, SwipeAction.NONE

    action = resolve_swipe_action(offset, state is SwipeState.REVEALED)
    if action is SwipeAction.REVEAL:
        return SwipeState.REVEALED, action
    if action is SwipeAction.CONFIRM_DELETE:
        return SwipeState.DELETED, action
    if action is SwipeAction.DISMISS:
        return SwipeState.IDLE, action
    return state, action


class SwipeTracker:
    """Per-row swipe states for one rendered list.

    Reveals are positional, so any change to the set or order of rows resets every
    row to idle.
    """

    def __init__(self, item_ids: Iterable[Hashable] = ()) -> None:
        self._order: Tuple[Hashable, ...] = tuple(item_ids)
        self._states: Dict[Hashable, SwipeState] = {
            item_id: SwipeState.IDLE for item_id in self._order
        }

    def state(self, item_id: Hashable) -> SwipeState:
        return self._states.get(item_id, SwipeState.IDLE)

    def is_revealed(self, item_id: Hashable) -> bool:
        return self.state(item_id) is SwipeState.REVEALED

    def handle_drag(self, item_id: Hashable, offset: float) -> SwipeAction:
        if item_id not in self._states:
            return SwipeAction.NONE
        new_state, action = next_swipe_state(self._states[item_id], offset)
        self._states[item_id] = new_state
        if action is not SwipeAction.NONE:
            logger.debug("Swipe item=%s offset=%.1f action=%s", item_id, offset, action.value)
        return action

    def dismiss(self, item_id: Hashable) -> None:
        if self._states.get(item_id) is SwipeState.REVEALED:
            self._states[item_id] = SwipeState.IDLE

    def dismiss_all(self) -> None:
        for item_id, state in self._states.items():
            if state is SwipeState.REVEALED:
                self._states[item_id] = SwipeState.IDLE

    def sync(self, item_ids: Iterable[Hashable]) -> bool:
        """Adopt a new row order; returns True when the rows changed and states reset."""

        order = tuple(item_ids)
        if order == self._order:
            return False
        self._order = order
        self._states = {item_id: SwipeState.IDLE for item_id in order}
        return True

    def deleted_ids(self) -> Tuple[Hashable, ...]:
        return tuple(item_id for item_id in self._order if self._states[item_id] is SwipeState.DELETED)


__all__ = [
    "REVEAL_THRESHOLD",
    "CONFIRM_DELETE_THRESHOLD",
    "DISMISS_THRESHOLD",
    "SwipeAction",
    "SwipeState",
    "resolve_swipe_action",
    "should_delete_on_swipe",
    "next_swipe_state",
    "SwipeTracker",
]
