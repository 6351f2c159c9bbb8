"""Reading M3U, M3U8 and PLS playlist files."""

from __future__ import annotations

import os
import posixpath
import re
from dataclasses import dataclass
from enum import Enum
from typing import BinaryIO
from urllib.parse import unquote, urljoin, urlsplit

LINE_LIMIT = 4096

_SCHEME = re.compile(r"^([A-Za-z][A-Za-z0-9+.\-]*):")
_INTEGER = re.compile(r"[+-]?[0-9]+")
_INT_MAX = 2**31 - 1


class FileType(Enum):
    """Kinds of playlist file."""

    UNKNOWN = 0
    M3U = 1
    M3U8 = 2  # UTF-8 flavour of M3U
    PLS = 3


class PlaylistErrorKind(Enum):
    """What went wrong while loading or saving a playlist."""

    NO_ERROR = 0
    FORMAT_ERROR = 1
    FORMAT_NOT_SUPPORTED_ERROR = 2
    NETWORK_ERROR = 3
    ACCESS_DENIED_ERROR = 4


class PlaylistError(Exception):
    """Raised when a playlist cannot be read or written."""

    def __init__(self, kind: PlaylistErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message


@dataclass
class PlaylistEntry:
    """One item of a playlist, with whatever extra information the file gave."""

    url: str
    duration: int | None = None  # milliseconds
    author: str | None = None
    title: str | None = None


def find_by_mime_type(mime: str) -> FileType:
    """Return the playlist type matching a MIME type."""
    if mime in ("text/uri-list", "audio/x-mpegurl", "audio/mpegurl"):
        return FileType.M3U
    if mime in ("application/x-mpegURL", "application/vnd.apple.mpegurl"):
        return FileType.M3U8
    if mime == "audio/x-scpls":
        return FileType.PLS
    return FileType.UNKNOWN


def find_by_suffix_type(suffix: str) -> FileType:
    """Return the playlist type matching a file suffix, ignoring case."""
    return {
        "m3u": FileType.M3U,
        "m3u8": FileType.M3U8,
        "pls": FileType.PLS,
    }.get(suffix.lower(), FileType.UNKNOWN)


def find_by_data_header(data: bytes | None) -> FileType:
    """Return the playlist type announced by the first bytes of a file."""
    if not data:
        return FileType.UNKNOWN
    if data.startswith(b"#EXTM3U"):
        return FileType.M3U
    if data.startswith(b"[playlist]"):
        return FileType.PLS
    return FileType.UNKNOWN


def find_playlist_type(suffix: str, mime: str, data: bytes | None = None) -> FileType:
    """Guess the playlist type from content, then MIME type, then suffix."""
    for guess in (
        find_by_data_header(data),
        find_by_mime_type(mime),
        find_by_suffix_type(mime),
        find_by_suffix_type(suffix),
    ):
        if guess is not FileType.UNKNOWN:
            return guess
    return FileType.UNKNOWN


def _from_local_file(path: str) -> str:
    if len(path) > 1 and path[1] == ":" and path[0] != "/":
        path = "/" + path
    if path.startswith("//"):
        return "file:" + path
    if path.startswith("/"):
        return "file://" + path
    return "file:" + path


def _scheme(url: str) -> str:
    match = _SCHEME.match(url)
    return match.group(1) if match else ""


def _is_local_file(url: str) -> bool:
    return _scheme(url).lower() == "file"


def _suffix(url: str) -> str:
    name = url.rsplit("/", 1)[-1]
    return name.rsplit(".", 1)[1] if "." in name else ""


def expand_to_full_path(root: str, line: str) -> str:
    """Turn a playlist line into a URL, resolving it against the playlist's URL."""
    if line.startswith("//") or line.startswith("\\\\"):
        # Network share paths are not resolved
        return _from_local_file(line)

    scheme = _scheme(line)
    if not scheme:
        if _is_local_file(root):
            if line.startswith("/"):
                return _from_local_file(line)
            directory = posixpath.dirname(unquote(urlsplit(root).path))
            return _from_local_file(posixpath.normpath(posixpath.join(directory, line)))
        return urljoin(root, line) if root else line
    if len(scheme) == 1:
        # A drive letter of a Windows path
        return _from_local_file(line)
    return line


def get_split_index(line: str, start_pos: int) -> int:
    """Find the single '-' that separates artist from title; '--' is an escaped dash."""
    i = max(start_pos, 0)
    while i < len(line):
        if line[i] == "-":
            if i == len(line) - 1:
                return i
            i += 1
            if line[i] != "-":
                return i - 1
        i += 1
    return -1


def _to_int(text: str) -> int | None:
    if not _INTEGER.fullmatch(text):
        return None
    value = int(text)
    return value if -_INT_MAX - 1 <= value <= _INT_MAX else None


class M3UParser:
    """Line parser for plain and extended M3U playlists."""

    def __init__(self) -> None:
        self.extended = False
        self._extra: dict[str, object] = {}

    def parse_line(self, line_index: int, line: str, root: str) -> PlaylistEntry | None:
        """Consume one non-empty line; return the entry it completes, if any."""
        if line.startswith("#"):
            if self.extended:
                if line.startswith("#EXTINF:"):
                    self._parse_extinf(line)
            elif line_index == 0 and line.startswith("#EXTM3U"):
                self.extended = True
            return None

        entry = PlaylistEntry(url=expand_to_full_path(root, line), **self._extra)
        self._extra = {}
        return entry

    def _parse_extinf(self, line: str) -> None:
        self._extra = {}
        artist_start = line.find(",", 8)
        length_text = line[8:] if artist_start < 8 else line[8:artist_start]
        length = _to_int(length_text.strip())
        if length is not None and length > 0:
            self._extra["duration"] = length * 1000
        if artist_start > 0:
            title_start = get_split_index(line, artist_start)
            if title_start > artist_start:
                self._extra["author"] = _unescape(line[artist_start + 1 : title_start])
                self._extra["title"] = _unescape(line[title_start + 1 :])
            else:
                self._extra["title"] = _unescape(line[artist_start + 1 :])


def _unescape(text: str) -> str:
    return text.strip().replace("--", "-")


class PLSParser:
    """Line parser for PLS playlists; only File entries are used."""

    def parse_line(self, line_index: int, line: str, root: str) -> PlaylistEntry | None:
        """Return an entry for a FileN= line, ignore everything else."""
        if not line.startswith("File"):
            return None
        _, sep, value = line.partition("=")
        value = value.strip()
        if not sep or not value:
            return None
        return PlaylistEntry(url=expand_to_full_path(root, value))


class PlaylistFileParser:
    """Reads a whole playlist from a byte stream or a local file."""

    def parse(
        self, stream: BinaryIO, mime_type: str = "", root: str = ""
    ) -> list[PlaylistEntry]:
        """Parse the stream and return its entries in order."""
        if stream is None or getattr(stream, "closed", False) or not _readable(stream):
            raise PlaylistError(PlaylistErrorKind.ACCESS_DENIED_ERROR, "Invalid stream")

        data = stream.read()
        if isinstance(data, str):
            data = data.encode("utf-8")
        if not data:
            raise PlaylistError(
                PlaylistErrorKind.FORMAT_NOT_SUPPORTED_ERROR, "Empty file provided"
            )

        segments = re.split(rb"[\r\n]", data)
        last = len(segments) - 1
        parser: M3UParser | PLSParser | None = None
        encoding = "latin-1"
        line_index = -1
        entries: list[PlaylistEntry] = []

        for position, raw in enumerate(segments):
            if len(raw) >= LINE_LIMIT:
                raise PlaylistError(
                    PlaylistErrorKind.FORMAT_ERROR, "invalid line in playlist file"
                )
            if not raw and position != last:
                continue
            line_index += 1

            if parser is None:
                file_type = find_playlist_type(_suffix(root), mime_type, data)
                if file_type is FileType.UNKNOWN:
                    raise PlaylistError(
                        PlaylistErrorKind.FORMAT_ERROR, f"{root} playlist type is unknown"
                    )
                if file_type is FileType.PLS:
                    parser = PLSParser()
                else:
                    parser = M3UParser()
                    if file_type is FileType.M3U8:
                        encoding = "utf-8"

            line = raw.decode(encoding, errors="replace").strip()
            if not line:
                continue
            entry = parser.parse_line(line_index, line, root)
            if entry is not None:
                entries.append(entry)

        return entries

    def parse_file(self, path: str | os.PathLike, mime_type: str = "") -> list[PlaylistEntry]:
        """Parse a playlist stored in a local file."""
        absolute = os.path.abspath(os.fspath(path))
        url = _from_local_file(absolute)
        if not os.path.exists(absolute):
            raise PlaylistError(
                PlaylistErrorKind.ACCESS_DENIED_ERROR, f"{url} does not exist"
            )
        with open(absolute, "rb") as stream:
            return self.parse(stream, mime_type, url)


def _readable(stream: object) -> bool:
    readable = getattr(stream, "readable", None)
    if readable is None:
        return hasattr(stream, "read")
    return bool(readable())