"""A table view of a media playlist with drag-and-drop reordering."""

from __future__ import annotations

import struct
from collections.abc import Callable, Iterable
from enum import Enum, IntEnum
from typing import Any

from tunedeck.playlist import MediaPlaylist, Signal

MIME_TYPE = "application/playlist.model"

_NULL_STRING = 0xFFFFFFFF


class Column(IntEnum):
    """Columns shown for every playlist row."""

    TRACK = 0
    TITLE = 1
    ARTIST = 2
    ALBUM = 3
    DURATION = 4


COLUMN_COUNT = len(Column)


class ItemRole(Enum):
    """What kind of value a header query asks for."""

    DISPLAY = 0
    SIZE_HINT = 1


_HEADER_LABELS = {
    Column.TRACK: "TRACK",
    Column.TITLE: "TITLE",
    Column.ARTIST: "ARTIST",
    Column.ALBUM: "ALBUM",
    Column.DURATION: "DURATION",
}

_HEADER_SIZES = {
    Column.TRACK: (80, 40),
    Column.TITLE: (180, 40),
    Column.ARTIST: (180, 40),
    Column.ALBUM: (180, 40),
    Column.DURATION: (70, 40),
}

_PLAYING_MARK = " \u25b6 "
_IDLE_MARK = "   "


def _encode_strings(texts: Iterable[str]) -> bytes:
    """Length-prefixed UTF-16BE strings, as a binary data stream writes them."""
    chunks = []
    for text in texts:
        payload = text.encode("utf-16-be")
        chunks.append(struct.pack(">I", len(payload)) + payload)
    return b"".join(chunks)


def _decode_strings(data: bytes) -> list[str]:
    texts = []
    offset = 0
    while offset < len(data):
        if offset + 4 > len(data):
            raise ValueError("truncated string length in drag data")
        (length,) = struct.unpack_from(">I", data, offset)
        offset += 4
        if length == _NULL_STRING:
            texts.append("")
            continue
        if offset + length > len(data):
            raise ValueError("truncated string in drag data")
        texts.append(data[offset : offset + length].decode("utf-16-be"))
        offset += length
    return texts


def _to_int(text: str) -> int:
    try:
        return int(text.strip())
    except ValueError:
        return 0


class PlaylistModel:
    """Rows and columns over a MediaPlaylist, following its changes."""

    def __init__(
        self,
        playlist: MediaPlaylist | None = None,
        duration_formatter: Callable[[int], str] | None = None,
    ) -> None:
        self.playlist = playlist if playlist is not None else MediaPlaylist()
        self._format_duration = duration_formatter or str

        self.rows_about_to_be_inserted = Signal()
        self.rows_inserted = Signal()
        self.rows_about_to_be_removed = Signal()
        self.rows_removed = Signal()
        self.data_changed = Signal()

        self.playlist.media_about_to_be_inserted.connect(self.rows_about_to_be_inserted.emit)
        self.playlist.media_inserted.connect(self.rows_inserted.emit)
        self.playlist.media_about_to_be_removed.connect(self.rows_about_to_be_removed.emit)
        self.playlist.media_removed.connect(self._end_remove_items)
        self.playlist.media_changed.connect(self.data_changed.emit)

    def _end_remove_items(self, start: int, end: int) -> None:
        self.rows_removed.emit(start, end)
        self.data_changed.emit(0, self.playlist.media_count)

    def row_count(self) -> int:
        """Number of rows, one per playlist item."""
        return self.playlist.media_count

    def column_count(self) -> int:
        """Number of columns."""
        return COLUMN_COUNT

    def header_data(self, section: int, role: ItemRole = ItemRole.DISPLAY) -> Any:
        """Header label, or (width, height) size hint, of a column; None if unknown."""
        try:
            column = Column(section)
        except ValueError:
            return None
        if role is ItemRole.SIZE_HINT:
            return _HEADER_SIZES[column]
        if role is ItemRole.DISPLAY:
            return _HEADER_LABELS[column]
        return None

    def _valid(self, row: int, column: int) -> bool:
        return 0 <= row < self.playlist.media_count and 0 <= column < COLUMN_COUNT

    def data(self, row: int, column: int) -> Any:
        """Display value of a cell; None for cells outside the table."""
        if not self._valid(row, column):
            return None
        meta = self.playlist.media_metadata(row)
        column = Column(column)
        if column is Column.TRACK:
            mark = _PLAYING_MARK if self.playlist.current_index == row else _IDLE_MARK
            track = meta.get("track_number")
            return mark + ("" if track is None else str(track))
        if column is Column.TITLE:
            return meta.get("title")
        if column is Column.ARTIST:
            return meta.get("album_artist")
        if column is Column.ALBUM:
            return meta.get("album_title")
        return self._format_duration(int(meta.get("duration") or 0))

    def remove_rows(self, row: int, count: int) -> bool:
        """Remove the playlist item at each position from ``row`` to ``row + count - 1``.

        Each removal shifts the following items up before the next position is taken.
        """
        for position in range(row, row + count):
            self.playlist.remove_media(position)
        return True

    def mime_types(self) -> list[str]:
        """MIME types this model can produce and accept."""
        return [MIME_TYPE]

    def mime_data(self, rows: Iterable[int]) -> bytes:
        """Encode the given rows for a drag; rows outside the table are skipped."""
        return _encode_strings(str(row) for row in rows if self._valid(row, 0))

    def can_drop_mime_data(self, data: bytes, mime_type: str, row: int) -> bool:
        """Whether dropped data of ``mime_type`` may land before ``row``."""
        return mime_type == MIME_TYPE and row != -1

    def drop_mime_data(self, data: bytes, mime_type: str, row: int) -> bool:
        """Move the dragged rows so that they start at ``row``."""
        if not self.can_drop_mime_data(data, mime_type, row):
            return False
        for original in _decode_strings(data):
            new_index = min(row, self.playlist.media_count - 1)
            self.playlist.move_media(_to_int(original), new_index)
            row += 1
        return True