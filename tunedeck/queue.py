"""Playback order: the displayed playlist, the play queue and the cursor into both."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class PlaybackMode(Enum):
    """The order in which playlist items are played."""

    CURRENT_ITEM_ONCE = 0
    CURRENT_ITEM_IN_LOOP = 1
    SEQUENTIAL = 2
    LOOP = 3


def _truncated_mod(value: int, modulus: int) -> int:
    """Remainder whose sign follows the dividend, as integer division truncates."""
    remainder = abs(value) % modulus
    return -remainder if value < 0 else remainder


def _index_of(items: list[str], item: str) -> int:
    try:
        return items.index(item)
    except ValueError:
        return -1


def _step_forward(size: int, current: int, steps: int, mode: PlaybackMode) -> int:
    if size == 0:
        return -1

    target = current + steps
    if mode is PlaybackMode.CURRENT_ITEM_ONCE:
        return -1 if steps != 0 else current
    if mode is PlaybackMode.CURRENT_ITEM_IN_LOOP:
        return current
    if mode is PlaybackMode.SEQUENTIAL:
        if target >= size:
            target = -1
    elif mode is PlaybackMode.LOOP:
        target = _truncated_mod(target, size)
    return target


def _step_back(size: int, current: int, steps: int, mode: PlaybackMode) -> int:
    if size == 0:
        return -1

    target = size if current < 0 else current
    target -= steps
    if mode is PlaybackMode.CURRENT_ITEM_ONCE:
        return -1 if steps != 0 else current
    if mode is PlaybackMode.CURRENT_ITEM_IN_LOOP:
        return current
    if mode is PlaybackMode.SEQUENTIAL:
        if target < 0:
            target = -1
    elif mode is PlaybackMode.LOOP:
        target %= size
    return target


@dataclass
class PlayOrder:
    """Keeps the displayed playlist and the (possibly shuffled) play queue in step.

    A position of -1 means that nothing is current.
    """

    playlist: list[str] = field(default_factory=list)
    playqueue: list[str] = field(default_factory=list)
    playback_mode: PlaybackMode = PlaybackMode.SEQUENTIAL
    _current_pos: int = field(default=-1, init=False, repr=False)
    _current_queue_pos: int = field(default=-1, init=False, repr=False)

    @property
    def current_pos(self) -> int:
        """Position of the current item in the playlist."""
        return self._current_pos

    @property
    def current_queue_pos(self) -> int:
        """Position of the current item in the play queue."""
        return self._current_queue_pos

    def next_position(self, steps: int = 1) -> int:
        """Playlist position reached after moving forward ``steps`` items."""
        return _step_forward(len(self.playlist), self._current_pos, steps, self.playback_mode)

    def prev_position(self, steps: int = 1) -> int:
        """Playlist position reached after moving back ``steps`` items."""
        return _step_back(len(self.playlist), self._current_pos, steps, self.playback_mode)

    def next_queue_position(self, steps: int = 1) -> int:
        """Queue position reached after moving forward ``steps`` items."""
        return _step_forward(
            len(self.playqueue), self._current_queue_pos, steps, self.playback_mode
        )

    def prev_queue_position(self, steps: int = 1) -> int:
        """Queue position reached after moving back ``steps`` items."""
        return _step_back(
            len(self.playqueue), self._current_queue_pos, steps, self.playback_mode
        )

    def set_current_pos(self, pos: int) -> None:
        """Make playlist position ``pos`` current and follow it in the queue."""
        self._current_pos = pos
        if pos < 0 or pos >= len(self.playlist):
            self._current_queue_pos = pos
            return
        self._current_queue_pos = _index_of(self.playqueue, self.playlist[pos])

    def set_current_queue_pos(self, pos: int) -> None:
        """Make queue position ``pos`` current and follow it in the playlist."""
        self._current_queue_pos = pos
        if pos < 0 or pos >= len(self.playlist):
            self._current_pos = pos
            return
        self._current_pos = _index_of(self.playlist, self.playqueue[pos])