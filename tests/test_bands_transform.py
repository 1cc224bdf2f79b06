import math

import pytest

from celtcore.bands_transform import (
    deinterleave_hadamard,
    haar1,
    intensity_stereo,
    interleave_hadamard,
    stereo_merge,
    stereo_split,
)

SAMPLE = [0.3, -1.2, 0.8, 0.05, -0.4, 2.0, 1.1, -0.7]


def _norm(v):
    return math.sqrt(sum(a * a for a in v))


@pytest.mark.parametrize("n0,stride", [(8, 1), (4, 2), (2, 4)])
def test_haar1_is_its_own_inverse(n0, stride):
    twice = haar1(haar1(SAMPLE, n0, stride), n0, stride)
    assert twice == pytest.approx(SAMPLE, abs=1e-6)


def test_haar1_preserves_energy():
    out = haar1(SAMPLE, 8, 1)
    assert _norm(out) == pytest.approx(_norm(SAMPLE), rel=1e-6)


def test_haar1_constant_pair():
    out = haar1([1.0, 1.0], 2, 1)
    assert out == pytest.approx([math.sqrt(2), 0.0], abs=1e-6)


def test_haar1_rejects_short_input():
    with pytest.raises(ValueError):
        haar1([1.0, 2.0], 4, 1)


def test_deinterleave_plain_transposes():
    out = deinterleave_hadamard([0, 1, 2, 3, 4, 5], 3, 2, False)
    assert out == [0, 2, 4, 1, 3, 5]


def test_deinterleave_hadamard_stride_two():
    out = deinterleave_hadamard([0, 1, 2, 3], 2, 2, True)
    assert out == [1, 3, 0, 2]


@pytest.mark.parametrize("hadamard", [False, True])
@pytest.mark.parametrize("n0,stride", [(4, 2), (2, 4), (1, 8)])
def test_interleave_undoes_deinterleave(n0, stride, hadamard):
    data = [float(v) for v in range(n0 * stride)]
    back = interleave_hadamard(
        deinterleave_hadamard(data, n0, stride, hadamard), n0, stride, hadamard
    )
    assert back == data


def test_deinterleave_is_permutation_for_sixteen():
    data = list(range(32))
    out = deinterleave_hadamard(data, 2, 16, True)
    assert sorted(out) == data


def test_tail_is_left_untouched():
    data = [0.0, 1.0, 2.0, 3.0, 9.0]
    out = deinterleave_hadamard(data, 2, 2, False)
    assert out[-1] == 9.0


def test_hadamard_rejects_bad_stride():
    with pytest.raises(ValueError):
        deinterleave_hadamard([0.0] * 6, 2, 3, True)
    with pytest.raises(ValueError):
        interleave_hadamard([0.0] * 6, 2, 3, True)


def test_stereo_split_preserves_energy():
    x = SAMPLE[:4]
    y = SAMPLE[4:]
    mid, side = stereo_split(x, y)
    before = sum(a * a for a in x + y)
    after = sum(a * a for a in mid + side)
    assert after == pytest.approx(before, rel=1e-6)


def test_stereo_split_identical_channels_have_no_side():
    x = [0.5, -0.25, 1.0]
    _, side = stereo_split(x, x)
    assert side == pytest.approx([0.0, 0.0, 0.0])


def test_stereo_split_length_mismatch():
    with pytest.raises(ValueError):
        stereo_split([1.0], [1.0, 2.0])


def test_stereo_merge_outputs_unit_norm():
    x = [0.6, 0.8, 0.0]
    y = [0.1, -0.05, 0.3]
    left, right = stereo_merge(x, y, 0.9)
    assert _norm(left) == pytest.approx(1.0, rel=1e-6)
    assert _norm(right) == pytest.approx(1.0, rel=1e-6)


def test_stereo_merge_low_energy_copies_mid():
    x = [0.6, 0.8]
    left, right = stereo_merge(x, [0.0, 0.0], 0.0)
    assert left == x
    assert right == x


def test_intensity_stereo_right_silent_keeps_left():
    x = [0.2, -0.4, 0.6]
    out = intensity_stereo(x, [5.0, 5.0, 5.0], 1.0, 0.0)
    assert out == pytest.approx(x, rel=1e-6)


def test_intensity_stereo_equal_energies_average():
    x = [1.0, 0.0]
    y = [0.0, 1.0]
    out = intensity_stereo(x, y, 2.0, 2.0)
    assert out[0] == pytest.approx(out[1])
    assert _norm(out) == pytest.approx(1.0, rel=1e-6)


def test_intensity_stereo_length_mismatch():
    with pytest.raises(ValueError):
        intensity_stereo([1.0, 2.0], [1.0], 1.0, 1.0)