"""Analysis package: the Fourier engine and the playback state machine.

Design principle:
  - :class:`SpectralEngine` is computed once per signal and is read-only after.
  - :class:`PlaybackController` consumes one engine and produces frames; it owns
    all mutable animation state.

Positions are expressed on the sample index grid; the only time source is the
elapsed time the host passes to :meth:`PlaybackController.step`.
"""

from .spectral import (
    EmptyInputError,
    FrequencyOutOfBoundsError,
    InvalidRangeError,
    NonFiniteValueError,
    SpectralEngine,
    SpectralError,
    dft_direct,
    spectrum_table,
)
from .playback import PlaybackController, PlaybackState, TickHandler
from .signals import EXAMPLES, example_signal

__all__ = [
    "SpectralEngine",
    "SpectralError",
    "EmptyInputError",
    "NonFiniteValueError",
    "InvalidRangeError",
    "FrequencyOutOfBoundsError",
    "dft_direct",
    "spectrum_table",
    "PlaybackController",
    "PlaybackState",
    "TickHandler",
    "EXAMPLES",
    "example_signal",
]
