"""Analyses that steer time-frequency resolution, allocation trim and stereo coding."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from typing import Sequence

from celtcore.bands_energy import BandLayout
from celtcore.bands_transform import haar1

__all__ = [
    "TfAnalysis",
    "l1_metric",
    "tf_analysis",
    "alloc_trim_analysis",
    "stereo_analysis",
]

_EPSILON = 1e-15
_MAX_LM = 3

# 1/sqrt(M) for M = 1, 2, 4, 8 short blocks.
_SQRT_M_1: tuple[float, ...] = (1.0, 0.70710678, 0.5, 0.35355339)

# Per LM, the tf_res values chosen for (transient, tf_select, bit).
_TF_SELECT_TABLE: tuple[tuple[int, ...], ...] = (
    (0, -1, 0, -1, 0, -1, 0, -1),
    (0, -1, 0, -2, 1, 0, 1, -1),
    (0, -2, 0, -3, 2, 0, 1, -1),
    (0, -2, 0, -3, 3, 0, 1, -1),
)

_TRIM_DEFAULT = 5
_STEREO_BANDS = 13
_CORRELATION_BANDS = 8


@dataclass
class TfAnalysis:
    """Outcome of the time-frequency resolution analysis."""

    tf_select: int
    tf_res: list[int] = field(default_factory=list)
    tf_sum: int = 0


def _check_lm(lm: int) -> None:
    if not 0 <= lm <= _MAX_LM:
        raise ValueError(f"LM must be between 0 and {_MAX_LM}, not {lm}")


def _check_channels(channels: int) -> None:
    if channels not in (1, 2):
        raise ValueError("one or two channels are supported")


def l1_metric(tmp: Sequence[float], n: int, lm: int, width: int) -> float:
    """Return the biased L1 norm of the per-block L2 norms of ``tmp``.

    ``tmp`` holds ``1 << lm`` interleaved blocks of ``n >> lm`` values each.
    Narrow bands get a larger bias towards higher time resolution.
    """
    _check_lm(lm)
    if n < 0 or len(tmp) < n:
        raise ValueError(f"{n} values are needed, {len(tmp)} were given")
    blocks = 1 << lm
    per_block = n >> lm
    total = sum(
        math.sqrt(sum(v * v for v in tmp[i : per_block * blocks : blocks]))
        for i in range(blocks)
    )
    total *= _SQRT_M_1[lm]
    if width == 1:
        bias = 0.12 * lm
    elif width == 2:
        bias = 0.05 * lm
    else:
        bias = 0.02 * lm
    return total + bias * total


def tf_analysis(
    layout: BandLayout,
    length: int,
    channels: int,
    is_transient: bool,
    nb_compressed_bytes: int,
    x: Sequence[float],
    n0: int,
    lm: int,
) -> TfAnalysis:
    """Choose, band by band, whether to change the time-frequency resolution.

    ``x`` holds the normalised spectrum, the second channel (if any) starting
    at ``n0``. A Viterbi search trades the per-band preference against the
    cost of switching between neighbouring bands.
    """
    _check_lm(lm)
    _check_channels(channels)
    if not 1 <= length <= layout.nb_bands:
        raise ValueError(f"length {length} out of range")
    transient = 1 if is_transient else 0

    if nb_compressed_bytes < 15 * channels:
        return TfAnalysis(tf_select=0, tf_res=[transient] * length, tf_sum=0)

    if nb_compressed_bytes < 40:
        lam = 12
    elif nb_compressed_bytes < 60:
        lam = 6
    elif nb_compressed_bytes < 100:
        lam = 4
    else:
        lam = 3

    e_bands = layout.e_bands
    needed = (e_bands[length] << lm) + (n0 if channels == 2 else 0)
    if len(x) < needed:
        raise ValueError(f"{needed} spectrum values are needed, {len(x)} were given")

    metric: list[int] = []
    for i in range(length):
        start = e_bands[i] << lm
        n = (e_bands[i + 1] - e_bands[i]) << lm
        tmp = list(x[start : start + n])
        if channels == 2:
            tmp = [a + b for a, b in zip(tmp, x[n0 + start : n0 + start + n])]
        best_l1 = l1_metric(tmp, n, lm if transient else 0, n >> lm)
        best_level = 0
        for k in range(lm):
            if transient:
                blocks = lm - k - 1
                tmp = haar1(tmp, n >> (lm - k), 1 << (lm - k))
            else:
                blocks = k + 1
                tmp = haar1(tmp, n >> k, 1 << k)
            l1 = l1_metric(tmp, n, blocks, n >> lm)
            if l1 < best_l1:
                best_l1 = l1
                best_level = k + 1
        metric.append(best_level if transient else -best_level)
    tf_sum = sum(metric)

    tf_select = 0
    row = _TF_SELECT_TABLE[lm]
    target0 = row[4 * transient + 2 * tf_select]
    target1 = row[4 * transient + 2 * tf_select + 1]

    cost0 = 0
    cost1 = 0 if transient else lam
    path0 = [0] * length
    path1 = [0] * length
    for i in range(1, length):
        from0, from1 = cost0, cost1 + lam
        if from0 < from1:
            curr0, path0[i] = from0, 0
        else:
            curr0, path0[i] = from1, 1
        from0, from1 = cost0 + lam, cost1
        if from0 < from1:
            curr1, path1[i] = from0, 0
        else:
            curr1, path1[i] = from1, 1
        cost0 = curr0 + abs(metric[i] - target0)
        cost1 = curr1 + abs(metric[i] - target1)

    tf_res = [0] * length
    tf_res[-1] = 0 if cost0 < cost1 else 1
    for i in range(length - 2, -1, -1):
        tf_res[i] = path1[i + 1] if tf_res[i + 1] == 1 else path0[i + 1]
    return TfAnalysis(tf_select=tf_select, tf_res=tf_res, tf_sum=tf_sum)


def alloc_trim_analysis(
    layout: BandLayout,
    x: Sequence[float],
    band_log_e: Sequence[float],
    end: int,
    lm: int,
    channels: int,
    n0: int,
) -> int:
    """Return the allocation trim index (0 to 10, default 5).

    Strong low-frequency inter-channel correlation and a rising spectral
    tilt lower the trim; a falling tilt raises it.
    """
    _check_lm(lm)
    _check_channels(channels)
    if not 2 <= end <= layout.nb_bands:
        raise ValueError(f"end band {end} out of range")
    if len(band_log_e) < end - 1:
        raise ValueError("not enough band energies")
    e_bands = layout.e_bands
    trim_index = _TRIM_DEFAULT

    if channels == 2:
        if layout.nb_bands < _CORRELATION_BANDS:
            raise ValueError(f"stereo trim analysis needs {_CORRELATION_BANDS} bands")
        if len(x) < n0 + (e_bands[_CORRELATION_BANDS] << lm):
            raise ValueError("the spectrum is too short for both channels")
        total = 0.0
        for i in range(_CORRELATION_BANDS):
            lo, hi = e_bands[i] << lm, e_bands[i + 1] << lm
            total += sum(a * b for a, b in zip(x[lo:hi], x[n0 + lo : n0 + hi]))
        total *= 1.0 / 8
        if total > 0.995:
            trim_index -= 4
        elif total > 0.92:
            trim_index -= 3
        elif total > 0.85:
            trim_index -= 2
        elif total > 0.8:
            trim_index -= 1

    # Spectral tilt, estimated from the first channel only.
    nb = layout.nb_bands
    diff = sum(band_log_e[i] * (2 + 2 * i - nb) for i in range(end - 1))
    diff /= channels * (end - 1)
    if diff > 2.0:
        trim_index -= 1
    if diff > 8.0:
        trim_index -= 1
    if diff < -4.0:
        trim_index += 1
    if diff < -10.0:
        trim_index += 1
    return max(0, min(10, trim_index))


def stereo_analysis(layout: BandLayout, x: Sequence[float], lm: int, n0: int) -> bool:
    """Return True when coding left/right separately looks cheaper than mid/side."""
    _check_lm(lm)
    if layout.nb_bands < _STEREO_BANDS:
        raise ValueError(f"stereo analysis needs {_STEREO_BANDS} bands")
    e_bands = layout.e_bands
    limit = e_bands[_STEREO_BANDS] << lm
    if len(x) < n0 + limit:
        raise ValueError("the spectrum is too short for both channels")
    sum_lr = _EPSILON
    sum_ms = _EPSILON
    for left, right in zip(x[:limit], x[n0 : n0 + limit]):
        sum_lr += abs(left) + abs(right)
        sum_ms += abs(left + right) + abs(left - right)
    sum_ms *= 0.707107
    thetas = _STEREO_BANDS
    # Lower bands need no theta when LM <= 1.
    if lm <= 1:
        thetas -= 8
    width = e_bands[_STEREO_BANDS] << (lm + 1)
    return (width + thetas) * sum_ms > width * sum_lr