"""Band, stereo, time-domain and time-frequency analysis building blocks of the CELT audio codec."""

__version__ = "0.1.0"

__all__ = [
    "bands_energy",
    "bands_transform",
    "tfanalysis",
    "timedomain",
    "wraplines",
]