import pytest

from tunedeck.model import MIME_TYPE, Column, ItemRole, PlaylistModel
from tunedeck.playlist import MediaPlaylist

META = {
    "a": {"track_number": 1, "title": "Alpha", "album_artist": "Band", "album_title": "LP", "duration": 1000},
    "b": {"track_number": 2, "title": "Beta", "duration": 2000},
    "c": {"title": "Gamma"},
    "d": {},
}


def make_model(items=("a", "b", "c")):
    playlist = MediaPlaylist(lambda url: META.get(url, {}))
    model = PlaylistModel(playlist, lambda ms: f"{ms}ms")
    playlist.add_media(list(items))
    return model


def test_counts():
    model = make_model()
    assert model.row_count() == 3
    assert model.column_count() == 5


def test_header_labels_and_sizes():
    model = make_model()
    assert model.header_data(Column.TRACK) == "TRACK"
    assert model.header_data(Column.DURATION, ItemRole.DISPLAY) == "DURATION"
    assert model.header_data(Column.TITLE, ItemRole.SIZE_HINT) == (180, 40)
    assert model.header_data(Column.TRACK, ItemRole.SIZE_HINT) == (80, 40)
    assert model.header_data(9) is None


def test_cell_values():
    model = make_model()
    assert model.data(0, Column.TITLE) == "Alpha"
    assert model.data(0, Column.ARTIST) == "Band"
    assert model.data(0, Column.ALBUM) == "LP"
    assert model.data(0, Column.DURATION) == "1000ms"
    assert model.data(2, Column.DURATION) == "0ms"
    assert model.data(1, Column.ARTIST) is None


def test_track_column_marks_current_item():
    model = make_model()
    assert model.data(0, Column.TRACK) == "   1"
    model.playlist.set_current_index(0)
    assert model.data(0, Column.TRACK) == " \u25b6 1"
    assert model.data(2, Column.TRACK) == "   "


def test_data_out_of_range():
    model = make_model()
    assert model.data(3, 0) is None
    assert model.data(0, 5) is None
    assert model.data(-1, 0) is None


def test_remove_rows_shifts_between_removals():
    model = make_model(("a", "b", "c", "d"))
    assert model.remove_rows(0, 2) is True
    assert model.playlist.items == ["b", "d"]


def test_remove_emits_data_changed():
    model = make_model()
    seen = []
    model.data_changed.connect(lambda *args: seen.append(args))
    model.remove_rows(1, 1)
    assert (0, 2) in seen


def test_mime_types():
    assert make_model().mime_types() == [MIME_TYPE]


def test_mime_data_encoding():
    model = make_model()
    assert model.mime_data([0]) == b"\x00\x00\x00\x02\x00\x30"
    assert model.mime_data([7]) == b""


def test_can_drop():
    model = make_model()
    data = model.mime_data([0])
    assert model.can_drop_mime_data(data, MIME_TYPE, 1) is True
    assert model.can_drop_mime_data(data, "text/plain", 1) is False
    assert model.can_drop_mime_data(data, MIME_TYPE, -1) is False


def test_drop_moves_to_bottom():
    model = make_model()
    data = model.mime_data([0])
    assert model.drop_mime_data(data, MIME_TYPE, 5) is True
    assert model.playlist.items == ["b", "c", "a"]


def test_drop_moves_up():
    model = make_model()
    assert model.drop_mime_data(model.mime_data([2]), MIME_TYPE, 0) is True
    assert model.playlist.items == ["c", "a", "b"]


def test_drop_rejected_keeps_order():
    model = make_model()
    assert model.drop_mime_data(model.mime_data([2]), "text/plain", 0) is False
    assert model.playlist.items == ["a", "b", "c"]


def test_drop_truncated_data():
    model = make_model()
    with pytest.raises(ValueError):
        model.drop_mime_data(b"\x00\x00\x00\x08\x00", MIME_TYPE, 0)


def test_insert_signals_forwarded():
    model = make_model()
    seen = []
    model.rows_inserted.connect(lambda start, end: seen.append((start, end)))
    model.playlist.add_media(["d"])
    assert seen == [(3, 3)]
    assert model.row_count() == 4