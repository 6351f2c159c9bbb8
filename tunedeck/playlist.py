"""An ordered list of media with a separately shuffled play queue."""

from __future__ import annotations

import io
import os
import random
from collections.abc import Callable, Iterable, Mapping
from typing import IO, Any

from tunedeck.parser import FileType, PlaylistError, PlaylistErrorKind, PlaylistFileParser
from tunedeck.queue import PlaybackMode, PlayOrder

Metadata = Mapping[str, Any]

_M3U_FORMATS = ("m3u", "text/uri-list", "audio/x-mpegurl", "audio/mpegurl")
_M3U8_FORMATS = ("m3u8", "application/x-mpegURL", "application/vnd.apple.mpegurl")


class Signal:
    """A list of callbacks invoked together."""

    def __init__(self) -> None:
        self._callbacks: list[Callable[..., Any]] = []

    def connect(self, callback: Callable[..., Any]) -> None:
        """Call ``callback`` every time the signal is emitted."""
        self._callbacks.append(callback)

    def emit(self, *args: Any) -> None:
        """Invoke every connected callback with ``args``."""
        for callback in list(self._callbacks):
            callback(*args)


def check_format(format: str | None) -> FileType:
    """Return the playlist type a format name stands for; only M3U flavours can be saved."""
    if format is None:
        return FileType.M3U8
    if format in _M3U_FORMATS:
        return FileType.M3U
    if format in _M3U8_FORMATS:
        return FileType.M3U8
    raise PlaylistError(
        PlaylistErrorKind.FORMAT_NOT_SUPPORTED_ERROR, "This file format is not supported."
    )


def write_m3u(stream: IO[Any], items: Iterable[str]) -> None:
    """Write one URL per line to a text or binary stream."""
    text = isinstance(stream, io.TextIOBase)
    for item in items:
        line = item + "\n"
        stream.write(line if text else line.encode("utf-8"))


class MediaPlaylist:
    """A playlist of media URLs, their metadata and the position being played."""

    def __init__(self, metadata_loader: Callable[[str], Metadata] | None = None) -> None:
        self._load_metadata_for = metadata_loader
        self._order = PlayOrder()
        self._metadata: dict[str, Metadata] = {}
        self._shuffle_enabled = False
        self._error = PlaylistErrorKind.NO_ERROR
        self._error_string = ""

        self.current_index_changed = Signal()
        self.playback_mode_changed = Signal()
        self.current_media_changed = Signal()
        self.current_selection_changed = Signal()
        self.media_about_to_be_inserted = Signal()
        self.media_inserted = Signal()
        self.media_about_to_be_removed = Signal()
        self.media_removed = Signal()
        self.media_changed = Signal()
        self.loaded = Signal()
        self.load_failed = Signal()

    # -- state -------------------------------------------------------------

    @property
    def playback_mode(self) -> PlaybackMode:
        """The order in which items are played."""
        return self._order.playback_mode

    def set_playback_mode(self, mode: PlaybackMode) -> None:
        """Change the playback order, announcing it if it differs."""
        if mode is self._order.playback_mode:
            return
        self._order.playback_mode = mode
        self.playback_mode_changed.emit(mode)

    @property
    def shuffle_enabled(self) -> bool:
        """Whether the play queue is kept shuffled."""
        return self._shuffle_enabled

    def set_shuffle(self, shuffle: bool) -> None:
        """Turn shuffling of the play queue on or off."""
        self._shuffle_enabled = shuffle
        if shuffle:
            self.shuffle()
        else:
            self.unshuffle()

    @property
    def current_index(self) -> int:
        """Position of the current item in the playlist, -1 for none."""
        return self._order.current_pos

    @property
    def current_queue_index(self) -> int:
        """Position of the current item in the play queue, -1 for none."""
        return self._order.current_queue_pos

    @property
    def media_count(self) -> int:
        """Number of items in the playlist."""
        return len(self._order.playlist)

    @property
    def is_empty(self) -> bool:
        """True when the playlist has no items."""
        return self.media_count == 0

    @property
    def items(self) -> list[str]:
        """A copy of the playlist in display order."""
        return list(self._order.playlist)

    @property
    def queue(self) -> list[str]:
        """A copy of the play queue in playing order."""
        return list(self._order.playqueue)

    @property
    def error(self) -> PlaylistErrorKind:
        """The kind of the last load or save error."""
        return self._error

    @property
    def error_string(self) -> str:
        """The message of the last load or save error."""
        return self._error_string

    # -- lookup ------------------------------------------------------------

    def current_media(self) -> str | None:
        """The current playlist item, or None."""
        return self.media(self._order.current_pos)

    def current_queue_media(self) -> str | None:
        """The current play queue item, or None."""
        return self.queue_media(self._order.current_queue_pos)

    def next_index(self, steps: int = 1) -> int:
        """Playlist position after ``steps`` calls of next."""
        return self._order.next_position(steps)

    def previous_index(self, steps: int = 1) -> int:
        """Playlist position after ``steps`` calls of previous."""
        return self._order.prev_position(steps)

    def next_queue_index(self, steps: int = 1) -> int:
        """Queue position after ``steps`` calls of next."""
        return self._order.next_queue_position(steps)

    def previous_queue_index(self, steps: int = 1) -> int:
        """Queue position after ``steps`` calls of previous."""
        return self._order.prev_queue_position(steps)

    def media(self, index: int) -> str | None:
        """The playlist item at ``index``, or None if out of range."""
        playlist = self._order.playlist
        return playlist[index] if 0 <= index < len(playlist) else None

    def queue_media(self, index: int) -> str | None:
        """The play queue item at ``index``, or None if out of range."""
        queue = self._order.playqueue
        return queue[index] if 0 <= index < len(queue) else None

    def media_metadata(self, index: int) -> dict[str, Any]:
        """Metadata of the playlist item at ``index``; empty if unknown."""
        return dict(self._metadata.get(self.media(index), {}))

    def queue_media_metadata(self, index: int) -> dict[str, Any]:
        """Metadata of the play queue item at ``index``; empty if unknown."""
        return dict(self._metadata.get(self.queue_media(index), {}))

    def total_duration(self) -> int:
        """Sum of the known durations of all items, in milliseconds."""
        return sum(
            int(self._metadata[url].get("duration") or 0)
            for url in self._order.playlist
            if url in self._metadata
        )

    # -- editing -----------------------------------------------------------

    def add_media(self, content: str | Iterable[str]) -> None:
        """Append one URL or several to the playlist."""
        items = [content] if isinstance(content, str) else list(content)
        if not items:
            return
        first = len(self._order.playlist)
        last = first + len(items) - 1
        self.media_about_to_be_inserted.emit(first, last)
        for item in items:
            self._load_metadata(item)
        self._order.playlist.extend(items)
        self._refill_queue()
        self.media_inserted.emit(first, last)

    def insert_media(self, pos: int, content: str | Iterable[str]) -> bool:
        """Insert one URL or several at ``pos``, clamped to the playlist bounds."""
        items = [content] if isinstance(content, str) else list(content)
        if not items:
            return True
        playlist = self._order.playlist
        pos = max(0, min(pos, len(playlist)))
        last = pos + len(items) - 1
        self.media_about_to_be_inserted.emit(pos, last)
        playlist[pos:pos] = items
        self._refill_queue()
        self.media_inserted.emit(pos, last)
        return True

    def move_media(self, from_: int, to: int) -> bool:
        """Move the item at ``from_`` so that it ends up at ``to``."""
        playlist = self._order.playlist
        count = len(playlist)
        if from_ < 0 or from_ > count or to < 0 or to > count:
            return False
        if from_ == to:
            return False
        if from_ == count or to == count:
            raise IndexError("move position out of range")

        current = self._order.current_pos
        new_current = current
        if current == from_:
            new_current = to
        if from_ < to and from_ < current <= to:
            new_current = current - 1
        if from_ > to and to <= current < from_:
            new_current = current + 1

        playlist.insert(to, playlist.pop(from_))
        self._refill_queue()
        self._order.set_current_pos(new_current)

        self.media_changed.emit(0, len(playlist))
        self.current_selection_changed.emit(to)
        return True

    def remove_media(self, start: int, end: int | None = None) -> bool:
        """Remove items ``start`` to ``end`` inclusive; ``end`` defaults to ``start``."""
        if end is None:
            end = start
        playlist = self._order.playlist
        if end < start or end < 0 or start >= len(playlist):
            return False
        start = max(0, min(start, len(playlist) - 1))
        end = max(0, min(end, len(playlist) - 1))

        current = self._order.current_pos
        new_current = current
        if start <= current <= end:
            new_current = -1
        if current > end:
            new_current = current - (end - start) - 1

        self.media_about_to_be_removed.emit(start, end)
        del playlist[start : end + 1]
        self._refill_queue()
        self._vacuum_metadata()
        self._order.set_current_pos(new_current)

        self.media_removed.emit(start, end)
        self.media_changed.emit(0, len(playlist))
        return True

    def clear(self) -> None:
        """Remove every item."""
        size = len(self._order.playlist)
        self.media_about_to_be_removed.emit(0, size - 1)
        self._order.playlist.clear()
        self._order.playqueue.clear()
        self._vacuum_metadata()
        self.media_removed.emit(0, size - 1)

    # -- files -------------------------------------------------------------

    def load(self, source: str | os.PathLike | IO[bytes], format: str | None = None) -> None:
        """Append the items of a playlist file or stream; the format is guessed if None."""
        self._error = PlaylistErrorKind.NO_ERROR
        self._error_string = ""
        parser = PlaylistFileParser()
        mime_type = format or ""
        try:
            if isinstance(source, (str, os.PathLike)):
                entries = parser.parse_file(source, mime_type)
            else:
                entries = parser.parse(source, mime_type)
        except PlaylistError as exc:
            self._error = exc.kind
            self._error_string = exc.message
            self.load_failed.emit()
            raise
        self.add_media([entry.url for entry in entries])
        self.loaded.emit()

    def save(self, target: str | os.PathLike | IO[Any], format: str | None = None) -> None:
        """Write the playlist as M3U to a path or an open stream."""
        self._error = PlaylistErrorKind.NO_ERROR
        self._error_string = ""
        try:
            check_format(format)
        except PlaylistError as exc:
            self._error = exc.kind
            self._error_string = exc.message
            raise

        if not isinstance(target, (str, os.PathLike)):
            write_m3u(target, self._order.playlist)
            return
        try:
            stream = open(target, "w", encoding="utf-8", newline="\n")
        except OSError as exc:
            self._error = PlaylistErrorKind.ACCESS_DENIED_ERROR
            self._error_string = "The file could not be accessed."
            raise PlaylistError(self._error, self._error_string) from exc
        with stream:
            write_m3u(stream, self._order.playlist)

    # -- play order --------------------------------------------------------

    def shuffle(self) -> None:
        """Shuffle the play queue, keeping the current item where it is."""
        queue = self._order.playqueue
        if not queue:
            return
        pos = self._order.current_queue_pos
        keep = 0 <= pos < len(queue)
        current = queue.pop(pos) if keep else None
        random.shuffle(queue)
        if keep:
            queue.insert(pos, current)
        self.media_changed.emit(0, len(queue))

    def unshuffle(self) -> None:
        """Restore the play queue to playlist order, following the current item."""
        queue = self._order.playqueue
        if not queue:
            return
        pos = self._order.current_queue_pos
        current = queue[pos] if 0 <= pos < len(queue) else None
        self._order.playqueue = list(self._order.playlist)
        new_pos = (
            self._order.playqueue.index(current)
            if current in self._order.playqueue
            else -1
        )
        self._order.set_current_queue_pos(new_pos)
        self.media_changed.emit(0, len(self._order.playqueue))

    def next(self) -> None:
        """Advance to the next item of the play queue, if there is one."""
        position = self._order.next_queue_position(1)
        if position == -1:
            return
        self._order.set_current_queue_pos(position)
        self._announce_current()

    def previous(self) -> None:
        """Go back to the previous item of the play queue, if there is one."""
        position = self._order.prev_queue_position(1)
        if position == -1:
            return
        self._order.set_current_queue_pos(position)
        self._announce_current()

    def set_current_index(self, index: int) -> None:
        """Make playlist item ``index`` current; out of range means none."""
        if index < 0 or index >= len(self._order.playlist):
            index = -1
        self._order.set_current_pos(index)
        self._announce_current()

    def set_current_queue_index(self, index: int) -> None:
        """Make play queue item ``index`` current; out of range means none."""
        if index < 0 or index >= len(self._order.playqueue):
            index = -1
        self._order.set_current_queue_pos(index)
        self._announce_current()

    # -- internals ---------------------------------------------------------

    def _announce_current(self) -> None:
        self.current_index_changed.emit(self._order.current_pos)
        self.current_media_changed.emit(self.current_media())

    def _refill_queue(self) -> None:
        self._order.playqueue = list(self._order.playlist)
        if self._shuffle_enabled:
            self.shuffle()

    def _load_metadata(self, url: str) -> None:
        if url in self._metadata:
            return
        loader = self._load_metadata_for
        self._metadata[url] = loader(url) if loader is not None else {}

    def _vacuum_metadata(self) -> None:
        used = set(self._order.playlist)
        for url in [key for key in self._metadata if key not in used]:
            del self._metadata[url]