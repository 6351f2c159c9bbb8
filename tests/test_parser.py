import io

import pytest

from tunedeck.parser import (
    FileType,
    M3UParser,
    PLSParser,
    PlaylistEntry,
    PlaylistError,
    PlaylistErrorKind,
    PlaylistFileParser,
    expand_to_full_path,
    find_by_data_header,
    find_by_mime_type,
    find_by_suffix_type,
    find_playlist_type,
    get_split_index,
)

EXAMPLE_M3U = (
    b"#EXTM3U\n"
    b"#EXTINF:123, Sample artist - Sample title\n"
    b"http://example.com/Sample.mp3\n"
    b"#EXTINF:321,Example Artist - Example title\n"
    b"http://example.com/Example.ogg\n"
)


@pytest.mark.parametrize(
    "mime, expected",
    [
        ("text/uri-list", FileType.M3U),
        ("audio/x-mpegurl", FileType.M3U),
        ("audio/mpegurl", FileType.M3U),
        ("application/x-mpegURL", FileType.M3U8),
        ("application/vnd.apple.mpegurl", FileType.M3U8),
        ("audio/x-scpls", FileType.PLS),
        ("text/plain", FileType.UNKNOWN),
    ],
)
def test_find_by_mime_type(mime, expected):
    assert find_by_mime_type(mime) is expected


@pytest.mark.parametrize(
    "suffix, expected",
    [
        ("m3u", FileType.M3U),
        ("M3U", FileType.M3U),
        ("m3u8", FileType.M3U8),
        ("Pls", FileType.PLS),
        ("mp3", FileType.UNKNOWN),
        ("", FileType.UNKNOWN),
    ],
)
def test_find_by_suffix_type(suffix, expected):
    assert find_by_suffix_type(suffix) is expected


@pytest.mark.parametrize(
    "data, expected",
    [
        (b"#EXTM3U\nfoo", FileType.M3U),
        (b"[playlist]\nFile1=a", FileType.PLS),
        (b"#EXTM3", FileType.UNKNOWN),
        (b"", FileType.UNKNOWN),
        (None, FileType.UNKNOWN),
    ],
)
def test_find_by_data_header(data, expected):
    assert find_by_data_header(data) is expected


def test_find_playlist_type_header_wins_over_suffix_and_mime():
    assert find_playlist_type("pls", "audio/x-scpls", b"#EXTM3U") is FileType.M3U


def test_find_playlist_type_mime_wins_over_suffix():
    assert find_playlist_type("pls", "audio/x-mpegurl", b"x") is FileType.M3U


def test_find_playlist_type_accepts_suffix_given_as_mime():
    assert find_playlist_type("", "m3u8", b"") is FileType.M3U8


def test_find_playlist_type_falls_back_to_suffix():
    assert find_playlist_type("pls", "", None) is FileType.PLS
    assert find_playlist_type("txt", "", None) is FileType.UNKNOWN


def test_get_split_index_single_dash():
    line = "Artist - Title"
    assert get_split_index(line, 0) == line.index("-")


def test_get_split_index_skips_double_dash():
    line = "AC--DC - Song"
    assert get_split_index(line, 0) == line.rindex("-")


def test_get_split_index_trailing_dash_and_missing():
    assert get_split_index("abc-", 0) == len("abc-") - 1
    assert get_split_index("abc", 0) == -1
    assert get_split_index("a--b", 0) == -1


def test_get_split_index_negative_start_is_zero():
    line = "-x"
    assert get_split_index(line, -5) == get_split_index(line, 0)


def test_expand_keeps_urls_with_scheme():
    url = "http://example.com/music/a.mp3"
    assert expand_to_full_path("file:///music/list.m3u", url) == url


def test_expand_resolves_against_remote_root():
    root = "http://example.com/lists/top.m3u"
    assert expand_to_full_path(root, "a.mp3") == "http://example.com/lists/a.mp3"


def test_expand_resolves_relative_local_path():
    result = expand_to_full_path("file:///music/list.m3u", "song.mp3")
    assert result == "file:///music/song.mp3"


def test_expand_keeps_absolute_local_path():
    result = expand_to_full_path("file:///music/list.m3u", "/other/song.mp3")
    assert result == "file://" + "/other/song.mp3"


def test_expand_network_share_is_not_resolved():
    line = "//server/share/a.mp3"
    result = expand_to_full_path("file:///music/list.m3u", line)
    assert result.startswith("file:")
    assert result.endswith(line)
    assert "music" not in result


def test_expand_drive_letter_becomes_local_file():
    line = "C:\\Music\\a.mp3"
    result = expand_to_full_path("http://example.com/x.m3u", line)
    assert result.startswith("file:")
    assert result.endswith(line)


def test_expand_without_root_returns_line():
    assert expand_to_full_path("", "a.mp3") == "a.mp3"


def test_m3u_parser_extended_entry():
    parser = M3UParser()
    assert parser.parse_line(0, "#EXTM3U", "") is None
    assert parser.extended
    assert parser.parse_line(1, "#EXTINF:123, Sample artist - Sample title", "") is None
    entry = parser.parse_line(2, "http://example.com/Sample.mp3", "")
    assert entry == PlaylistEntry(
        url="http://example.com/Sample.mp3",
        duration=123 * 1000,
        author="Sample artist",
        title="Sample title",
    )


def test_m3u_parser_clears_info_after_entry():
    parser = M3UParser()
    parser.parse_line(0, "#EXTM3U", "")
    parser.parse_line(1, "#EXTINF:5,Only title", "")
    first = parser.parse_line(2, "http://example.com/a.mp3", "")
    second = parser.parse_line(3, "http://example.com/b.mp3", "")
    assert first.title == "Only title"
    assert second.title is None and second.duration is None


def test_m3u_parser_title_without_artist_and_no_duration():
    parser = M3UParser()
    parser.parse_line(0, "#EXTM3U", "")
    parser.parse_line(1, "#EXTINF:-1,Just a title", "")
    entry = parser.parse_line(2, "http://example.com/a.mp3", "")
    assert entry.title == "Just a title"
    assert entry.author is None
    assert entry.duration is None


def test_m3u_parser_unescapes_double_dashes():
    parser = M3UParser()
    parser.parse_line(0, "#EXTM3U", "")
    parser.parse_line(1, "#EXTINF:10,AC--DC - Back--In", "")
    entry = parser.parse_line(2, "http://example.com/a.mp3", "")
    assert entry.author == "AC-DC"
    assert entry.title == "Back-In"


def test_m3u_parser_ignores_extinf_when_not_extended():
    parser = M3UParser()
    parser.parse_line(0, "#EXTINF:10,Artist - Title", "")
    entry = parser.parse_line(1, "http://example.com/a.mp3", "")
    assert entry == PlaylistEntry(url="http://example.com/a.mp3")
    assert not parser.extended


def test_m3u_header_only_counts_on_first_line():
    parser = M3UParser()
    parser.parse_line(1, "#EXTM3U", "")
    assert not parser.extended


def test_pls_parser_reads_file_entries_only():
    parser = PLSParser()
    assert parser.parse_line(0, "[playlist]", "") is None
    assert parser.parse_line(1, "Title1=Something", "") is None
    assert parser.parse_line(2, "File2=", "") is None
    assert parser.parse_line(3, "File3", "") is None
    entry = parser.parse_line(4, "File1= http://example.com/a.mp3 ", "")
    assert entry == PlaylistEntry(url="http://example.com/a.mp3")


def test_parse_extended_m3u_stream():
    entries = PlaylistFileParser().parse(io.BytesIO(EXAMPLE_M3U))
    assert [e.url for e in entries] == [
        "http://example.com/Sample.mp3",
        "http://example.com/Example.ogg",
    ]
    assert [e.title for e in entries] == ["Sample title", "Example title"]
    assert [e.author for e in entries] == ["Sample artist", "Example Artist"]


def test_parse_crlf_line_endings_keep_header_on_first_line():
    data = EXAMPLE_M3U.replace(b"\n", b"\r\n")
    entries = PlaylistFileParser().parse(io.BytesIO(data))
    assert [e.title for e in entries] == ["Sample title", "Example title"]


def test_parse_last_line_without_newline():
    data = b"#EXTM3U\nhttp://example.com/a.mp3"
    entries = PlaylistFileParser().parse(io.BytesIO(data))
    assert [e.url for e in entries] == ["http://example.com/a.mp3"]


def test_parse_pls_stream():
    data = (
        b"[playlist]\n"
        b"File1=http://example.com/a.mp3\n"
        b"Title1=My Cool Stream\n"
        b"Length1=233\n"
        b"NumberOfEntries=1\n"
        b"Version=2\n"
    )
    entries = PlaylistFileParser().parse(io.BytesIO(data))
    assert entries == [PlaylistEntry(url="http://example.com/a.mp3")]


def test_parse_uses_mime_type_when_header_is_missing():
    data = b"http://example.com/a.mp3\nhttp://example.com/b.mp3\n"
    entries = PlaylistFileParser().parse(io.BytesIO(data), "audio/x-mpegurl")
    assert [e.url for e in entries] == [
        "http://example.com/a.mp3",
        "http://example.com/b.mp3",
    ]


def test_parse_uses_root_suffix_and_resolves_against_root():
    root = "http://example.com/lists/top.m3u"
    entries = PlaylistFileParser().parse(io.BytesIO(b"a.mp3\n"), "", root)
    assert [e.url for e in entries] == [urljoin_expected(root, "a.mp3")]


def urljoin_expected(root, name):
    return root.rsplit("/", 1)[0] + "/" + name


def test_parse_m3u8_decodes_utf8():
    name = "ü.mp3"
    root = "http://example.com/lists/top.m3u8"
    entries = PlaylistFileParser().parse(io.BytesIO(name.encode("utf-8")), "", root)
    assert [e.url for e in entries] == [urljoin_expected(root, name)]


def test_parse_m3u_decodes_latin1():
    name = "ü.mp3"
    root = "http://example.com/lists/top.m3u"
    raw = name.encode("utf-8")
    entries = PlaylistFileParser().parse(io.BytesIO(raw), "", root)
    assert [e.url for e in entries] == [urljoin_expected(root, raw.decode("latin-1"))]


def test_parse_unknown_type_raises_format_error():
    with pytest.raises(PlaylistError) as info:
        PlaylistFileParser().parse(io.BytesIO(b"a.mp3\n"))
    assert info.value.kind is PlaylistErrorKind.FORMAT_ERROR
    assert "playlist type is unknown" in info.value.message


def test_parse_empty_stream_raises_not_supported():
    with pytest.raises(PlaylistError) as info:
        PlaylistFileParser().parse(io.BytesIO(b""), "audio/x-mpegurl")
    assert info.value.kind is PlaylistErrorKind.FORMAT_NOT_SUPPORTED_ERROR
    assert info.value.message == "Empty file provided"


def test_parse_blank_lines_only_give_empty_playlist():
    entries = PlaylistFileParser().parse(io.BytesIO(b"\n\n"), "audio/x-mpegurl")
    assert entries == []


def test_parse_overlong_line_raises_format_error():
    data = b"#EXTM3U\n" + b"a" * 5000 + b"\n"
    with pytest.raises(PlaylistError) as info:
        PlaylistFileParser().parse(io.BytesIO(data))
    assert info.value.kind is PlaylistErrorKind.FORMAT_ERROR
    assert info.value.message == "invalid line in playlist file"


def test_parse_closed_stream_is_invalid():
    stream = io.BytesIO(EXAMPLE_M3U)
    stream.close()
    with pytest.raises(PlaylistError) as info:
        PlaylistFileParser().parse(stream)
    assert info.value.kind is PlaylistErrorKind.ACCESS_DENIED_ERROR
    assert info.value.message == "Invalid stream"


def test_parse_file_missing_raises_access_denied(tmp_path):
    missing = tmp_path / "nothing.m3u"
    with pytest.raises(PlaylistError) as info:
        PlaylistFileParser().parse_file(missing)
    assert info.value.kind is PlaylistErrorKind.ACCESS_DENIED_ERROR
    assert info.value.message.endswith("does not exist")


def test_parse_file_resolves_relative_entries(tmp_path):
    playlist = tmp_path / "list.m3u"
    playlist.write_bytes(b"song.mp3\nsub/other.mp3\n")
    entries = PlaylistFileParser().parse_file(playlist)
    assert [e.url for e in entries] == [
        "file://" + str(tmp_path / "song.mp3"),
        "file://" + str(tmp_path / "sub" / "other.mp3"),
    ]


def test_parse_file_pls_by_suffix(tmp_path):
    playlist = tmp_path / "radio.pls"
    playlist.write_bytes(b"File1=http://example.com/stream\n")
    entries = PlaylistFileParser().parse_file(playlist)
    assert entries == [PlaylistEntry(url="http://example.com/stream")]