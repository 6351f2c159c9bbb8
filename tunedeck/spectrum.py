"""Spectrum analyser state: PCM input, logarithmic bands and falling peaks."""

from __future__ import annotations

import math
import struct
from collections.abc import Sequence

DFT_SIZE = 512
N_BANDS = 19
FREQ_BINS = DFT_SIZE // 2
RANGE_DB = 40

VIS_DELAY = 1  # frames before a bar falls
VIS_FALLOFF = 4  # pixels per frame
VIS_PEAK_DELAY = 16
VIS_PEAK_FALLOFF = 1

PCM_S16_MAX_AMPLITUDE = 32768
INT16 = "int16"

_BAR_COLORS = (
    (192, 0, 0),
    (191, 7, 0),
    (191, 28, 0),
    (191, 59, 0),
    (191, 95, 0),
    (191, 132, 0),
    (191, 163, 0),
    (191, 183, 0),
    (191, 191, 0),
    (183, 191, 0),
    (163, 191, 0),
    (132, 191, 0),
    (95, 191, 0),
    (59, 191, 0),
    (28, 191, 0),
    (7, 191, 0),
)


def pcm_to_float(pcm: int) -> float:
    """Scale a signed 16-bit sample to the range [-1.0, 1.0)."""
    return pcm / PCM_S16_MAX_AMPLITUDE


def to_mono(samples: Sequence[float], channels: int) -> list[float]:
    """Mix interleaved samples down to at most DFT_SIZE mono samples.

    With several channels only the first two are averaged.
    """
    if channels == 1:
        return list(samples[:DFT_SIZE])
    frames = min(DFT_SIZE, len(samples) // channels)
    return [
        (samples[frame * channels] + samples[frame * channels + 1]) / 2
        for frame in range(frames)
    ]


def compute_log_xscale(bands: int) -> list[float]:
    """Band edges spread logarithmically over the frequency bins."""
    return [math.pow(FREQ_BINS, i / bands) - 0.5 for i in range(bands + 1)]


def compute_freq_band(
    freq: Sequence[float], xscale: Sequence[float], band: int, bands: int
) -> float:
    """Level of one band in decibels; -inf for silence."""
    a = math.ceil(xscale[band])
    b = math.floor(xscale[band + 1])
    n = 0.0

    if b < a:
        n += freq[b] * (xscale[band + 1] - xscale[band])
    else:
        if a > 0:
            n += freq[a - 1] * (a - xscale[band])
        n += sum(freq[a:b])
        if b < FREQ_BINS:
            n += freq[b] * (xscale[band + 1] - b)

    # keep the overall height equal to a 12-band graph whatever the band count
    n *= bands / 12
    if n <= 0:
        return float("-inf")
    return 20 * math.log10(n)


def gradient_stops() -> list[tuple[float, tuple[int, int, int]]]:
    """Colour stops of the bar gradient, from top (0.0) to bottom (1.0)."""
    last = len(_BAR_COLORS) - 1
    return [(i / last, color) for i, color in enumerate(_BAR_COLORS)]


def _band_height(level: float) -> int:
    value = RANGE_DB + level
    if math.isnan(value) or value <= 0:
        return 0
    if value >= RANGE_DB:
        return RANGE_DB
    return int(value)


class SpectrumAnalyzer:
    """Holds the latest audio frame and the animated bar and peak heights."""

    def __init__(self) -> None:
        self.xscale = compute_log_xscale(N_BANDS)
        self.playing = False
        self.channels = 2
        self.clear()

    def play(self) -> None:
        """Start animating."""
        self.playing = True

    def pause(self) -> None:
        """Freeze the bars where they are."""
        self.playing = False

    def stop(self) -> None:
        """Stop animating and drop every bar to zero."""
        self.playing = False
        self.clear()

    def clear(self) -> None:
        """Reset samples, bars, peaks and their delays."""
        self.data = [0.0] * (DFT_SIZE * 4)
        self.band_values = [0] * (N_BANDS + 1)
        self.band_delays = [0] * (N_BANDS + 1)
        self.peak_values = [0] * (N_BANDS + 1)
        self.peak_delays = [0] * (N_BANDS + 1)

    @property
    def mono(self) -> list[float]:
        """The stored samples mixed down to mono, ready for a DFT."""
        return to_mono(self.data, self.channels)

    def set_data(self, data: bytes, sample_format: str = INT16, bytes_per_frame: int = 4) -> bool:
        """Store a frame of little-endian 16-bit stereo PCM.

        Returns False when there is too little data to use.
        """
        if sample_format != INT16:
            raise ValueError("only int16 samples are supported")
        if bytes_per_frame != 4:
            raise ValueError("expected 4 bytes per frame (int16 stereo)")
        if len(data) < DFT_SIZE * bytes_per_frame:
            return False

        self.channels = bytes_per_frame // 2
        count = min(DFT_SIZE * bytes_per_frame, len(data) // 2)
        for i, (pcm,) in enumerate(struct.iter_unpack("<h", data[: count * 2])):
            self.data[i] = pcm_to_float(pcm)
        return True

    def update(self, freq: Sequence[float]) -> None:
        """Advance one frame using the magnitude spectrum ``freq`` of the current samples."""
        if not self.playing:
            return
        for i in range(N_BANDS):
            x = _band_height(compute_freq_band(freq, self.xscale, i, N_BANDS))

            self.band_values[i] -= max(0, VIS_FALLOFF - self.band_delays[i])
            if self.band_delays[i]:
                self.band_delays[i] -= 1
            if x > self.band_values[i]:
                self.band_values[i] = x
                self.band_delays[i] = VIS_DELAY

            self.peak_values[i] -= max(0, VIS_PEAK_FALLOFF - self.peak_delays[i])
            if self.peak_delays[i]:
                self.peak_delays[i] -= 1
            if x > self.peak_values[i]:
                self.peak_values[i] = x
                self.peak_delays[i] = VIS_PEAK_DELAY