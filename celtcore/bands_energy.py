"""Band energy computation, normalisation and the spreading decision."""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import IntEnum
from typing import Sequence

__all__ = [
    "Spread",
    "BandLayout",
    "SpreadingState",
    "lcg_rand",
    "compute_band_energies",
    "normalise_bands",
    "denormalise_bands",
    "spreading_decision",
]

_MASK32 = 0xFFFFFFFF


class Spread(IntEnum):
    """How aggressively pulses are spread within a band."""

    NONE = 0
    LIGHT = 1
    NORMAL = 2
    AGGRESSIVE = 3


@dataclass(frozen=True)
class BandLayout:
    """Band edges (in units of short-MDCT bins) and the short MDCT size."""

    e_bands: tuple[int, ...]
    short_mdct_size: int

    def __post_init__(self) -> None:
        edges = tuple(int(e) for e in self.e_bands)
        if len(edges) < 2:
            raise ValueError("a band layout needs at least two band edges")
        if edges[0] < 0:
            raise ValueError("band edges must be non-negative")
        if any(b <= a for a, b in zip(edges, edges[1:])):
            raise ValueError("band edges must be strictly increasing")
        if self.short_mdct_size < edges[-1]:
            raise ValueError("bands extend past the short MDCT size")
        object.__setattr__(self, "e_bands", edges)

    @property
    def nb_bands(self) -> int:
        """Number of bands described by the layout."""
        return len(self.e_bands) - 1

    def frame_size(self, m: int) -> int:
        """Number of bins per channel for a frame of ``m`` short blocks."""
        return m * self.short_mdct_size

    def band_range(self, band: int, m: int) -> range:
        """Bin indices (within one channel) covered by ``band``."""
        if not 0 <= band < self.nb_bands:
            raise IndexError(f"band {band} out of range")
        return range(m * self.e_bands[band], m * self.e_bands[band + 1])


@dataclass
class SpreadingState:
    """Running averages carried from frame to frame by the spreading decision."""

    average: int = 256
    hf_average: int = 0
    tapset_decision: int = 0


def lcg_rand(seed: int) -> int:
    """Advance the 32-bit linear congruential generator by one step."""
    return (1664525 * seed + 1013904223) & _MASK32


def _check_end(layout: BandLayout, end: int) -> None:
    if not 0 <= end <= layout.nb_bands:
        raise ValueError(f"end band {end} out of range")


def compute_band_energies(
    layout: BandLayout, x: Sequence[float], end: int, channels: int, m: int
) -> list[float]:
    """Return the amplitude (square root of energy) of each band of each channel.

    The result holds ``channels * nb_bands`` values; bands at or past ``end``
    are left at zero.
    """
    _check_end(layout, end)
    n = layout.frame_size(m)
    bank = [0.0] * (channels * layout.nb_bands)
    for c in range(channels):
        base = c * n
        for i in range(end):
            total = 1e-27 + sum(x[base + j] * x[base + j] for j in layout.band_range(i, m))
            bank[i + c * layout.nb_bands] = math.sqrt(total)
    return bank


def normalise_bands(
    layout: BandLayout,
    freq: Sequence[float],
    bank: Sequence[float],
    end: int,
    channels: int,
    m: int,
) -> list[float]:
    """Scale each band of ``freq`` so that its energy is one."""
    _check_end(layout, end)
    n = layout.frame_size(m)
    out = [0.0] * (channels * n)
    for c in range(channels):
        base = c * n
        for i in range(end):
            g = 1.0 / (1e-27 + bank[i + c * layout.nb_bands])
            for j in layout.band_range(i, m):
                out[base + j] = freq[base + j] * g
    return out


def denormalise_bands(
    layout: BandLayout,
    x: Sequence[float],
    bank: Sequence[float],
    end: int,
    channels: int,
    m: int,
) -> list[float]:
    """Restore full amplitude to unit-energy bands; bins past ``end`` are zero."""
    if channels > 2:
        raise ValueError("denormalisation supports at most two channels")
    _check_end(layout, end)
    n = layout.frame_size(m)
    freq = [0.0] * (channels * n)
    for c in range(channels):
        base = c * n
        for i in range(end):
            g = bank[i + c * layout.nb_bands]
            for j in layout.band_range(i, m):
                freq[base + j] = x[base + j] * g
    return freq


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b >= 0) else -q


def spreading_decision(
    layout: BandLayout,
    x: Sequence[float],
    state: SpreadingState,
    last_decision: int,
    update_hf: bool,
    end: int,
    channels: int,
    m: int,
) -> Spread:
    """Decide how much to spread the pulses of the current frame.

    ``state`` is updated in place with the new running averages.
    """
    _check_end(layout, end)
    if end < 1:
        raise ValueError("at least one band is needed")
    e_bands = layout.e_bands
    if m * (e_bands[end] - e_bands[end - 1]) <= 8:
        return Spread.NONE

    n0 = layout.frame_size(m)
    total = 0
    nb_bands = 0
    hf_sum = 0
    for c in range(channels):
        for i in range(end):
            band = layout.band_range(i, m)
            n = len(band)
            if n <= 8:
                continue
            offset = c * n0
            tcount = [0, 0, 0]
            for j in band:
                v = x[offset + j]
                x2n = v * v * n
                if x2n < 0.25:
                    tcount[0] += 1
                if x2n < 0.0625:
                    tcount[1] += 1
                if x2n < 0.015625:
                    tcount[2] += 1
            # Only the last four bands (8 kHz and up) feed the tapset decision.
            if i > layout.nb_bands - 4:
                hf_sum += 32 * (tcount[1] + tcount[0]) // n
            tmp = sum(2 * count >= n for count in tcount)
            total += tmp * 256
            nb_bands += 1

    if update_hf:
        if hf_sum:
            hf_sum = _trunc_div(hf_sum, channels * (4 - layout.nb_bands + end))
        state.hf_average = (state.hf_average + hf_sum) >> 1
        hf_sum = state.hf_average
        if state.tapset_decision == 2:
            hf_sum += 4
        elif state.tapset_decision == 0:
            hf_sum -= 4
        if hf_sum > 22:
            state.tapset_decision = 2
        elif hf_sum > 18:
            state.tapset_decision = 1
        else:
            state.tapset_decision = 0

    total = _trunc_div(total, nb_bands)
    total = (total + state.average) >> 1
    state.average = total
    total = (3 * total + (((3 - int(last_decision)) << 7) + 64) + 2) >> 2
    if total < 80:
        return Spread.AGGRESSIVE
    if total < 256:
        return Spread.NORMAL
    if total < 384:
        return Spread.LIGHT
    return Spread.NONE