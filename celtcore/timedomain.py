"""Time-domain helpers: sample conversion, transient detection, comb filter, de-emphasis."""

from __future__ import annotations

import math
from typing import MutableSequence, Sequence

__all__ = [
    "float_to_int16",
    "transient_analysis",
    "comb_filter",
    "deemphasis",
]

_SIG_SCALE = 32768.0
_MAX_BINS = 50

# Tap gains of the comb filter, one row per tapset: centre, +/-1, +/-2.
_COMB_GAINS: tuple[tuple[float, float, float], ...] = (
    (0.3066406250, 0.2170410156, 0.1296386719),
    (0.4638671875, 0.2680664062, 0.0),
    (0.7998046875, 0.1000976562, 0.0),
)


def float_to_int16(x: float) -> int:
    """Convert a sample in the nominal range +/-1.0 to a clamped 16-bit integer."""
    scaled = x * _SIG_SCALE
    scaled = max(scaled, -32768.0)
    scaled = min(scaled, 32767.0)
    return int(math.floor(0.5 + scaled))


def transient_analysis(
    samples: Sequence[float], length: int, channels: int, overlap: int
) -> bool:
    """Return True when the frame of ``length`` samples contains a transient.

    For two channels ``samples`` holds the first channel followed by the
    second, each ``length`` long, and their sum is analysed.
    """
    if channels not in (1, 2):
        raise ValueError("transient analysis supports one or two channels")
    if length < 0:
        raise ValueError("length must be non-negative")
    block = overlap // 2
    if block < 1:
        raise ValueError("overlap must be at least 2")
    if len(samples) < channels * length:
        raise ValueError(
            f"{channels * length} samples are needed, {len(samples)} were given"
        )
    nbins = length // block
    if nbins > _MAX_BINS:
        raise ValueError(f"at most {_MAX_BINS} analysis blocks are supported")

    if channels == 1:
        tmp = [float(v) for v in samples[:length]]
    else:
        tmp = [samples[i] + samples[i + length] for i in range(length)]

    # High-pass filter: (1 - 2*z^-1 + z^-2) / (1 - z^-1 + .5*z^-2)
    mem0 = 0.0
    mem1 = 0.0
    for i, x in enumerate(tmp):
        y = mem0 + x
        mem0 = mem1 + y - 2 * x
        mem1 = x - 0.5 * y
        tmp[i] = y
    # The first samples are unreliable because the filter memory starts empty.
    for i in range(min(12, length)):
        tmp[i] = 0.0

    bins = [
        max((abs(v) for v in tmp[i * block : (i + 1) * block]), default=0.0)
        for i in range(nbins)
    ]

    is_transient = False
    for i, level in enumerate(bins):
        t1 = 0.15 * level
        t2 = 0.4 * level
        t3 = 0.15 * level
        conseq = 0
        for earlier in bins[:i]:
            if earlier < t1:
                conseq += 1
            if earlier < t2:
                conseq += 1
            else:
                conseq = 0
        if conseq >= 3:
            is_transient = True
        conseq = 0
        for later in bins[i + 1 :]:
            if later < t3:
                conseq += 1
            else:
                conseq = 0
        if conseq >= 7:
            is_transient = True
    return is_transient


def comb_filter(
    x: MutableSequence[float],
    start: int,
    t0: int,
    t1: int,
    n: int,
    g0: float,
    g1: float,
    tapset0: int,
    tapset1: int,
    window: Sequence[float] | None,
    overlap: int,
) -> list[float]:
    """Apply the pitch comb filter in place to ``x[start:start + n]``.

    Over the first ``overlap`` samples the filter cross-fades, using the
    squared ``window``, from period ``t0``/gain ``g0``/``tapset0`` to period
    ``t1``/gain ``g1``/``tapset1``; afterwards only the second set is used.
    Each output sample is written back before the next one is computed, so
    earlier outputs feed later ones. The filtered samples are returned.
    """
    if n < 0:
        raise ValueError("n must be non-negative")
    for tapset in (tapset0, tapset1):
        if not 0 <= tapset < len(_COMB_GAINS):
            raise ValueError(f"tapset {tapset} out of range")
    if overlap < 0:
        raise ValueError("overlap must be non-negative")
    fade = min(overlap, n)
    if fade and (window is None or len(window) < fade):
        raise ValueError("a window covering the overlap is needed")
    if start - max(t0 if fade else 0, t1) - 2 < 0:
        raise ValueError("not enough history before start for the pitch period")
    if start + n > len(x) or start + n - min(t0, t1) + 2 > len(x) + min(t0, t1):
        if start + n > len(x):
            raise ValueError("the buffer is too short for n samples")

    g00 = g0 * _COMB_GAINS[tapset0][0]
    g01 = g0 * _COMB_GAINS[tapset0][1]
    g02 = g0 * _COMB_GAINS[tapset0][2]
    g10 = g1 * _COMB_GAINS[tapset1][0]
    g11 = g1 * _COMB_GAINS[tapset1][1]
    g12 = g1 * _COMB_GAINS[tapset1][2]

    for i in range(start, start + fade):
        w = window[i - start]  # type: ignore[index]
        f = w * w
        a = 1.0 - f
        x[i] = (
            x[i]
            + a * g00 * x[i - t0]
            + a * g01 * x[i - t0 - 1]
            + a * g01 * x[i - t0 + 1]
            + a * g02 * x[i - t0 - 2]
            + a * g02 * x[i - t0 + 2]
            + f * g10 * x[i - t1]
            + f * g11 * x[i - t1 - 1]
            + f * g11 * x[i - t1 + 1]
            + f * g12 * x[i - t1 - 2]
            + f * g12 * x[i - t1 + 2]
        )
    for i in range(start + fade, start + n):
        x[i] = (
            x[i]
            + g10 * x[i - t1]
            + g11 * x[i - t1 - 1]
            + g11 * x[i - t1 + 1]
            + g12 * x[i - t1 - 2]
            + g12 * x[i - t1 + 2]
        )
    return list(x[start : start + n])


def deemphasis(
    signals: Sequence[Sequence[float]],
    n: int,
    downsample: int,
    coef: Sequence[float],
    mem: Sequence[float],
) -> tuple[list[float], list[float]]:
    """Undo the pre-emphasis and decimate each channel by ``downsample``.

    Returns the interleaved output samples, scaled to the nominal +/-1.0
    range, together with the updated per-channel filter memory.
    """
    channels = len(signals)
    if channels < 1:
        raise ValueError("at least one channel is needed")
    if len(mem) < channels:
        raise ValueError("one memory value per channel is needed")
    if len(coef) < 4:
        raise ValueError("four filter coefficients are needed")
    if downsample < 1:
        raise ValueError("downsample must be positive")
    if n < 0 or n % downsample:
        raise ValueError("n must be a non-negative multiple of downsample")

    per_channel = n // downsample
    pcm = [0.0] * (channels * per_channel)
    new_mem: list[float] = []
    count = 0
    for c, signal in enumerate(signals):
        if len(signal) < n:
            raise ValueError(f"channel {c} holds fewer than {n} samples")
        m = mem[c]
        out = c
        for x in signal[:n]:
            tmp = x + m
            m = coef[0] * tmp - coef[1] * x
            tmp = coef[3] * tmp
            count += 1
            if count == downsample:
                pcm[out] = tmp / _SIG_SCALE
                out += channels
                count = 0
        new_mem.append(m)
    return pcm, new_mem