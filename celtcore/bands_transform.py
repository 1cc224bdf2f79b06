"""Haar, Hadamard-reordering and stereo rotations applied to band vectors."""

from __future__ import annotations

import math
from typing import Sequence

__all__ = [
    "haar1",
    "deinterleave_hadamard",
    "interleave_hadamard",
    "stereo_split",
    "stereo_merge",
    "intensity_stereo",
]

_INV_SQRT2 = 0.70710678
_EPSILON = 1e-15
_MERGE_FLOOR = 6e-4

# Converts natural Hadamard order to "ordery" Hadamard order: a bit-reversed
# Gray code, reversed so that DC ends up last. One row each for 2, 4, 8, 16.
_ORDERY: dict[int, tuple[int, ...]] = {
    2: (1, 0),
    4: (3, 0, 2, 1),
    8: (7, 0, 4, 3, 6, 1, 5, 2),
    16: (15, 0, 8, 7, 12, 3, 11, 4, 14, 1, 9, 6, 13, 2, 10, 5),
}


def _check_block(x: Sequence[float], n0: int, stride: int) -> int:
    if n0 < 0:
        raise ValueError("n0 must be non-negative")
    if stride < 1:
        raise ValueError("stride must be positive")
    n = n0 * stride
    if len(x) < n:
        raise ValueError(f"vector holds {len(x)} values, {n} are needed")
    return n


def _ordery(stride: int) -> tuple[int, ...]:
    try:
        return _ORDERY[stride]
    except KeyError:
        raise ValueError(
            f"Hadamard reordering needs a stride of 2, 4, 8 or 16, not {stride}"
        ) from None


def haar1(x: Sequence[float], n0: int, stride: int) -> list[float]:
    """Apply one level of the Haar transform to ``stride`` interleaved vectors.

    The transform is orthonormal and its own inverse. Values past
    ``n0 * stride`` are returned unchanged.
    """
    _check_block(x, n0, stride)
    out = list(x)
    for i in range(stride):
        for j in range(n0 >> 1):
            a = stride * 2 * j + i
            b = stride * (2 * j + 1) + i
            tmp1 = _INV_SQRT2 * out[a]
            tmp2 = _INV_SQRT2 * out[b]
            out[a] = tmp1 + tmp2
            out[b] = tmp1 - tmp2
    return out


def deinterleave_hadamard(
    x: Sequence[float], n0: int, stride: int, hadamard: bool
) -> list[float]:
    """Regroup ``stride`` interleaved vectors of ``n0`` values into blocks.

    With ``hadamard`` set, the blocks are placed in ordery Hadamard order.
    """
    n = _check_block(x, n0, stride)
    order = _ordery(stride) if hadamard else range(stride)
    tmp = [0.0] * n
    for i, dest in enumerate(order):
        tmp[dest * n0 : dest * n0 + n0] = x[i:n:stride]
    return tmp + list(x[n:])


def interleave_hadamard(
    x: Sequence[float], n0: int, stride: int, hadamard: bool
) -> list[float]:
    """Undo :func:`deinterleave_hadamard`."""
    n = _check_block(x, n0, stride)
    order = _ordery(stride) if hadamard else range(stride)
    tmp = [0.0] * n
    for i, src in enumerate(order):
        tmp[i:n:stride] = x[src * n0 : src * n0 + n0]
    return tmp + list(x[n:])


def stereo_split(
    x: Sequence[float], y: Sequence[float]
) -> tuple[list[float], list[float]]:
    """Rotate left/right into mid/side by 45 degrees."""
    if len(x) != len(y):
        raise ValueError("both channels must have the same length")
    mid: list[float] = []
    side: list[float] = []
    for xv, yv in zip(x, y):
        left = _INV_SQRT2 * xv
        right = _INV_SQRT2 * yv
        mid.append(left + right)
        side.append(right - left)
    return mid, side


def stereo_merge(
    x: Sequence[float], y: Sequence[float], mid: float
) -> tuple[list[float], list[float]]:
    """Turn a unit-norm mid ``x`` and scaled side ``y`` back into left/right.

    Each output channel is renormalised to unit energy. When either channel
    would have almost no energy, the mid is copied into both.
    """
    if len(x) != len(y):
        raise ValueError("both channels must have the same length")
    xp = sum(a * b for a, b in zip(x, y))
    side = sum(b * b for b in y)
    xp *= mid
    el = mid * mid + side - 2 * xp
    er = mid * mid + side + 2 * xp
    if er < _MERGE_FLOOR or el < _MERGE_FLOOR:
        return list(x), list(x)
    lgain = 1.0 / math.sqrt(el)
    rgain = 1.0 / math.sqrt(er)
    left: list[float] = []
    right: list[float] = []
    for xv, yv in zip(x, y):
        m = mid * xv
        left.append(lgain * (m - yv))
        right.append(rgain * (m + yv))
    return left, right


def intensity_stereo(
    x: Sequence[float],
    y: Sequence[float],
    left_energy: float,
    right_energy: float,
) -> list[float]:
    """Mix both channels into one, weighted by their band amplitudes."""
    if len(x) != len(y):
        raise ValueError("both channels must have the same length")
    norm = _EPSILON + math.sqrt(
        _EPSILON + left_energy * left_energy + right_energy * right_energy
    )
    a1 = left_energy / norm
    a2 = right_energy / norm
    return [a1 * xv + a2 * yv for xv, yv in zip(x, y)]