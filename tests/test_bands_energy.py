import math

import pytest

from celtcore.bands_energy import (
    BandLayout,
    Spread,
    SpreadingState,
    compute_band_energies,
    denormalise_bands,
    lcg_rand,
    normalise_bands,
    spreading_decision,
)

SMALL = BandLayout((0, 2, 4, 8), 8)
WIDE = BandLayout((0, 16, 32), 32)


def _signal(n):
    return [math.sin(0.37 * k + 0.1) * (1 + k % 3) for k in range(n)]


def test_lcg_first_step_from_zero():
    assert lcg_rand(0) == 1013904223


def test_lcg_stays_within_32_bits():
    seed = 0xFFFFFFFF
    for _ in range(100):
        seed = lcg_rand(seed)
        assert 0 <= seed < 2**32


def test_band_range_scales_with_m():
    assert SMALL.band_range(2, 2) == range(8, 16)
    assert SMALL.nb_bands == 3


def test_band_range_out_of_range():
    with pytest.raises(IndexError):
        SMALL.band_range(3, 1)


def test_layout_rejects_decreasing_edges():
    with pytest.raises(ValueError):
        BandLayout((0, 4, 2), 8)


def test_band_energy_of_pythagorean_pair():
    layout = BandLayout((0, 2), 2)
    bank = compute_band_energies(layout, [3.0, 4.0], 1, 1, 1)
    assert bank[0] == pytest.approx(5.0)


def test_energies_beyond_end_are_zero():
    x = _signal(8)
    bank = compute_band_energies(SMALL, x, 2, 1, 1)
    assert bank[2] == 0.0
    assert bank[0] > 0.0


def test_normalised_bands_have_unit_energy():
    m, channels = 2, 2
    x = _signal(channels * SMALL.frame_size(m))
    bank = compute_band_energies(SMALL, x, 3, channels, m)
    norm = normalise_bands(SMALL, x, bank, 3, channels, m)
    n = SMALL.frame_size(m)
    for c in range(channels):
        for i in range(3):
            energy = sum(norm[c * n + j] ** 2 for j in SMALL.band_range(i, m))
            assert energy == pytest.approx(1.0)


def test_denormalise_round_trip():
    m, channels = 1, 2
    x = _signal(channels * SMALL.frame_size(m))
    bank = compute_band_energies(SMALL, x, 3, channels, m)
    norm = normalise_bands(SMALL, x, bank, 3, channels, m)
    back = denormalise_bands(SMALL, norm, bank, 3, channels, m)
    assert back == pytest.approx(x)


def test_denormalise_zeroes_tail():
    x = [1.0] * 8
    bank = [2.0, 2.0, 2.0]
    out = denormalise_bands(SMALL, x, bank, 2, 1, 1)
    assert out[4:] == [0.0] * 4
    assert out[:4] == pytest.approx([2.0] * 4)


def test_denormalise_rejects_three_channels():
    with pytest.raises(ValueError):
        denormalise_bands(SMALL, [0.0] * 24, [1.0] * 9, 3, 3, 1)


def test_narrow_last_band_means_no_spreading():
    state = SpreadingState()
    result = spreading_decision(SMALL, [0.1] * 8, state, Spread.NORMAL, True, 3, 1, 1)
    assert result is Spread.NONE
    assert state == SpreadingState()


def _spiky():
    x = [0.0] * 32
    x[0] = 1.0
    x[16] = 1.0
    return x


def test_spiky_spectrum_disables_spreading():
    state = SpreadingState()
    result = spreading_decision(WIDE, _spiky(), state, Spread.NORMAL, False, 2, 1, 1)
    assert result is Spread.NONE
    assert state.average > 256


def test_flat_spectrum_converges_to_aggressive():
    flat = [0.25] * 32
    state = SpreadingState()
    decision = Spread.NORMAL
    for _ in range(12):
        decision = spreading_decision(WIDE, flat, state, decision, False, 2, 1, 1)
    assert decision is Spread.AGGRESSIVE
    assert state.average < 80


def test_hf_average_only_updated_when_requested():
    state = SpreadingState()
    spreading_decision(WIDE, _spiky(), state, Spread.NORMAL, False, 2, 1, 1)
    assert state.hf_average == 0
    spreading_decision(WIDE, _spiky(), state, Spread.NORMAL, True, 2, 1, 1)
    assert state.hf_average > 0
    assert state.tapset_decision in (0, 1, 2)