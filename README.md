# tunedeck

The playlist and visualisation core of a small audio player, as a pure-Python library
with no dependencies.

## Modules

- `tunedeck.parser` reads M3U, M3U8 and PLS playlists. `PlaylistFileParser.parse` reads
  a byte stream. `PlaylistFileParser.parse_file` reads a local file. Both return a list
  of `PlaylistEntry` objects (`url`, `duration` in milliseconds, `author`, `title`).
  Extended M3U `#EXTINF` lines fill in the extra fields. The format is worked out from
  the data header, then the MIME type, then the file suffix (`find_playlist_type`).
  Relative entries are resolved against the playlist's location (`expand_to_full_path`).
  Failures raise `PlaylistError`, whose `kind` is a `PlaylistErrorKind`.
- `tunedeck.queue` provides `PlayOrder`. It keeps the displayed playlist and the play
  queue, which may be shuffled, in step. It holds the current position in both and
  computes next and previous positions under each `PlaybackMode`: `CURRENT_ITEM_ONCE`,
  `CURRENT_ITEM_IN_LOOP`, `SEQUENTIAL` (the default) and `LOOP`.
- `tunedeck.playlist` provides `MediaPlaylist`. It adds, inserts, moves, removes and
  clears items, shuffles and unshuffles the play queue, and steps with `next` and
  `previous`. It keeps per-track metadata and sums durations with `total_duration`.
  `load` reads a playlist file or stream and `save` writes the playlist as M3U.
  Changes are announced through `Signal` objects such as `media_inserted`,
  `media_removed`, `media_changed` and `current_index_changed`; attach callbacks with
  `connect`. `check_format` and `write_m3u` are also available on their own.
- `tunedeck.model` provides `PlaylistModel`, a table of rows and `Column`s over a
  `MediaPlaylist`. It gives header labels and size hints (`ItemRole`) and cell values;
  the current track is marked with ▶. It can encode dragged rows (`mime_data`) and
  reorder the playlist when they are dropped (`drop_mime_data`).
- `tunedeck.spectrum` provides `SpectrumAnalyzer`. It stores little-endian 16-bit
  stereo PCM frames (`set_data`), mixes them to mono (`mono`) and, given a magnitude
  spectrum, updates 19 logarithmic band heights and falling peak markers (`update`).
  Heights run from 0 to 40. `gradient_stops` gives the colours for the bars.

## Metadata

`MediaPlaylist` takes an optional `metadata_loader`. This is a callable that receives a
URL and returns a mapping. It is called once for each new URL added with `add_media`.
The keys that are read are:

- `duration`, in milliseconds;
- `track_number`, `title`, `album_artist` and `album_title`, which `PlaylistModel`
  displays.

## Installation

```
pip install .
```

For the tests:

```
pip install ".[test]"
pytest
```

## Examples

```python
import io
from tunedeck.parser import PlaylistFileParser

text = "#EXTM3U\n#EXTINF:123, Sample artist - Sample title\n/music/sample.mp3\n"
entries = PlaylistFileParser().parse(io.BytesIO(text.encode()), "audio/x-mpegurl", "")
for entry in entries:
    print(entry)
```

```python
from tunedeck.playlist import MediaPlaylist

playlist = MediaPlaylist(lambda url: {"duration": 1000})
playlist.add_media(["a.mp3", "b.mp3", "c.mp3"])
playlist.set_current_index(0)
playlist.next()
print(playlist.current_media(), playlist.total_duration())  # b.mp3 3000
```

## What it does not do

- It does not decode or play audio. The caller supplies the URLs, the metadata (through
  `metadata_loader`) and the PCM frames.
- `SpectrumAnalyzer` does not compute a Fourier transform. `update` expects the
  magnitude spectrum of the current samples, which the caller computes. The analyzer
  also draws nothing; it only keeps bar and peak heights.
- Playlists are read from local files and open streams only; nothing is fetched over a
  network.
- PLS files can be read but not written. `save` writes M3U only.
- There is no graphical interface and no command-line program. Use the package as a
  library.