# celtcore

Pure-Python building blocks of the CELT low-delay audio codec: the
per-band energy and normalisation steps, the band transforms and stereo
rotations, the time-domain filters around the MDCT, and the analyses
that steer time-frequency resolution, allocation trim and stereo coding.
No dependencies beyond the standard library.

## Installation

```
pip install .
```

For running the test suite:

```
pip install .[test]
pytest
```

## What is inside

| Module | Contents |
| --- | --- |
| `celtcore.bands_energy` | `BandLayout`, `Spread`, `SpreadingState`, `lcg_rand`, `compute_band_energies`, `normalise_bands`, `denormalise_bands`, `spreading_decision` |
| `celtcore.bands_transform` | `haar1`, `deinterleave_hadamard`, `interleave_hadamard`, `stereo_split`, `stereo_merge`, `intensity_stereo` |
| `celtcore.timedomain` | `float_to_int16`, `transient_analysis`, `comb_filter`, `deemphasis` |
| `celtcore.tfanalysis` | `TfAnalysis`, `l1_metric`, `tf_analysis`, `alloc_trim_analysis`, `stereo_analysis` |
| `celtcore.wraplines` | `wrap_lines` and the `celt-wrap-lines` command |

All functions take plain Python sequences and return new lists (except
`comb_filter`, which filters its buffer in place and also returns the
filtered samples). Invalid arguments raise `ValueError`.

### Band energies

A `BandLayout` describes where each band starts and ends in units of the
shortest MDCT, together with that MDCT's size; `band_range(band, m)`
gives the bins of a band for a frame of `m` short blocks.
`compute_band_energies` returns the square-root energy of each band,
`normalise_bands` scales every band to unit energy, and
`denormalise_bands` restores the amplitude from those energies (zeroing
bins past the last band). `spreading_decision` picks one of the `Spread`
levels for a frame, updating the running averages kept in a
`SpreadingState`. `lcg_rand` advances the codec's 32-bit linear
congruential generator.

```python
from celtcore.bands_energy import BandLayout, compute_band_energies, lcg_rand

layout = BandLayout(e_bands=(0, 2, 4), short_mdct_size=4)
compute_band_energies(layout, [3.0, 4.0, 0.0, 0.0], end=2, channels=1, m=1)
# approximately [5.0, 0.0]
lcg_rand(0)  # 1013904223
```

### Band transforms

`haar1` applies one orthonormal Haar level to interleaved vectors (it is
its own inverse). `deinterleave_hadamard` regroups interleaved blocks,
optionally into the "ordery" Hadamard order for strides 2, 4, 8 and 16,
and `interleave_hadamard` undoes it. `stereo_split` rotates left/right
into mid/side, `stereo_merge` turns mid/side back into unit-energy
left/right, and `intensity_stereo` mixes both channels into one weighted
by their band amplitudes.

### Time domain

`float_to_int16` converts a ±1.0 sample to a clamped 16-bit integer.
`transient_analysis` high-pass filters a frame (one channel, or the sum
of two) and reports whether it holds a transient. `comb_filter` applies
the pitch pre/post-filter, cross-fading between two period/gain/tapset
settings over the overlap. `deemphasis` undoes pre-emphasis, decimates,
and returns interleaved output with the updated filter memory.

### Time-frequency and stereo analysis

`tf_analysis` chooses per band whether to change time-frequency
resolution, using `l1_metric` and a Viterbi search, and returns a
`TfAnalysis` with `tf_select`, `tf_res` and `tf_sum`.
`alloc_trim_analysis` returns an allocation trim from 0 to 10 (default
5), and `stereo_analysis` reports whether separate left/right coding
looks cheaper than mid/side.

## What this package does not do

It is not a complete codec. There is no entropy coder, no bit
allocation, no MDCT, no encoder or decoder object and no bitstream
reading or writing, so it cannot turn PCM into packets or packets back
into PCM. It provides the analysis and transform steps listed above for
use in, or study of, such a codec.

## Command line

`celt-wrap-lines` reads text on standard input and writes it to standard
output with lines longer than the width (71 characters unless
`-w/--width` says otherwise) broken by a trailing backslash, turning tabs
into spaces, as used when preparing source listings for a document:

```
celt-wrap-lines < listing.c > listing.txt
celt-wrap-lines --width 60 < listing.c > listing.txt
```