"""Direct discrete Fourier analysis of a fixed signal.

Provides the :class:`SpectralEngine`, which computes the DFT coefficients of a
signal once and serves band-limited reconstructions, the power spectrum and
single-frequency epicycle vectors from that cached array.

Normalization
-------------
``coeff = DFT(signal)/N`` (analysis-normalized) and the inverse is
un-normalized, so summing the full band reproduces the signal exactly up to
floating-point precision.

Functions
---------
dft_direct
    O(N^2) forward transform with ``1/N`` normalization.
spectrum_table
    Per-coefficient DataFrame (signed frequency, amplitude, phase, power).
"""

from __future__ import annotations

import operator
from typing import List, Tuple

import numpy as np
import pandas as pd


class SpectralError(ValueError):
    """Base class for invalid inputs or queries of a :class:`SpectralEngine`."""


class EmptyInputError(SpectralError):
    """The signal has no samples."""


class NonFiniteValueError(SpectralError):
    """A sample has a NaN or infinite real or imaginary part."""


class InvalidRangeError(SpectralError):
    """Frequency band with ``k_min > k_max`` or ``k_max > max_frequency``."""


class FrequencyOutOfBoundsError(SpectralError):
    """Single-frequency index outside ``0..N-1``."""


def _as_index(value, error: type, name: str) -> int:
    """Return ``value`` as an int, rejecting anything that is not integral."""
    try:
        return operator.index(value)
    except TypeError:
        pass
    try:
        f = float(value)
    except (TypeError, ValueError):
        raise error(f"{name} must be an integer, got {value!r}") from None
    if not f.is_integer():
        raise error(f"{name} must be an integer, got {value!r}")
    return int(f)


def dft_direct(x: np.ndarray) -> np.ndarray:
    r"""Compute ``c[k] = (1/N) \sum_i x[i] e^{-2\pi j k i/N}`` by direct summation.

    The kernel matrix is built explicitly; no fast transform is used. Phases are
    reduced modulo N in integer arithmetic before scaling so large ``k*i``
    products do not lose precision.
    """
    x = np.asarray(x, dtype=np.complex128)
    if x.ndim != 1:
        raise ValueError(f"x must be 1D, got shape {x.shape}")
    N = x.size
    if N == 0:
        raise EmptyInputError("Input signal is empty")

    idx = np.arange(N, dtype=np.int64)
    phase = np.outer(idx, idx) % N
    kernel = np.exp(-2j * np.pi * phase / float(N))
    return (kernel @ x) / float(N)


class SpectralEngine:
    """Discrete Fourier decomposition of a fixed signal.

    Construction validates the samples and computes the coefficients exactly once.
    The instance is immutable afterwards; the arrays handed out are read-only
    views, so one engine can be shared by several consumers.

    Parameters
    ----------
    samples:
        1D array-like of real or complex samples. A closed 2-D curve is passed as
        ``x + 1j*y``.
    center:
        If True, subtract the mean of all samples before transforming. The
        centered signal is then what :meth:`original` returns and what the full
        band reconstructs.

    Raises
    ------
    EmptyInputError
        No samples.
    NonFiniteValueError
        Any real or imaginary part is NaN or infinite.
    """

    def __init__(self, samples, *, center: bool = False) -> None:
        x = np.asarray(samples)
        if x.ndim != 1:
            raise ValueError(f"samples must be 1D, got shape {x.shape}")
        if x.size == 0:
            raise EmptyInputError("Input signal is empty")

        x = x.astype(np.complex128)
        bad = ~(np.isfinite(x.real) & np.isfinite(x.imag))
        if np.any(bad):
            first = np.flatnonzero(bad)[:10].tolist()
            raise NonFiniteValueError(f"Input signal contains NaN or Inf at indices {first}")

        if center:
            x = x - x.mean()

        self._original = x
        self._original.setflags(write=False)
        self._coeff = dft_direct(x)
        self._coeff.setflags(write=False)
        self._centered = bool(center)

    @classmethod
    def create(cls, samples, *, center: bool = False) -> "SpectralEngine":
        """Validate ``samples`` and build an engine (same as the constructor)."""
        return cls(samples, center=center)

    @classmethod
    def from_real(cls, values, *, center: bool = False) -> "SpectralEngine":
        v = np.asarray(values, dtype=np.float64)
        return cls(v.astype(np.complex128), center=center)

    @classmethod
    def from_xy(cls, x, y, *, center: bool = False) -> "SpectralEngine":
        """Build an engine for a 2-D curve, packing the points as ``x + 1j*y``."""
        x = np.asarray(x, dtype=np.float64)
        y = np.asarray(y, dtype=np.float64)
        if x.shape != y.shape:
            raise ValueError(f"x and y must have the same shape, got {x.shape} and {y.shape}")
        return cls(x + 1j * y, center=center)

    # ------------------------------------------------------------------
    # Accessors
    # ------------------------------------------------------------------

    def size(self) -> int:
        return int(self._original.size)

    def original(self) -> np.ndarray:
        return self._original

    def max_frequency(self) -> int:
        """Largest band index accepted by :meth:`filtered_range` (``N // 2``)."""
        return self.size() // 2

    @property
    def coefficients(self) -> np.ndarray:
        return self._coeff

    @property
    def centered(self) -> bool:
        return self._centered

    def is_real(self) -> bool:
        return bool(np.all(self._original.imag == 0.0))

    def __repr__(self) -> str:
        return (
            f"SpectralEngine(N={self.size()}, max_frequency={self.max_frequency()}, "
            f"centered={self._centered})"
        )

    # ------------------------------------------------------------------
    # Band handling
    # ------------------------------------------------------------------

    def _check_band(self, k_min: int, k_max: int) -> Tuple[int, int]:
        k_min = _as_index(k_min, InvalidRangeError, "k_min")
        k_max = _as_index(k_max, InvalidRangeError, "k_max")
        max_k = self.max_frequency()
        if k_min < 0 or k_min > k_max or k_max > max_k:
            raise InvalidRangeError(
                f"Frequency range [{k_min}, {k_max}] out of bounds (max {max_k})"
            )
        return k_min, k_max

    def band_indices(self, k_min: int, k_max: int) -> List[int]:
        """Coefficient indices taking part in the band ``[k_min, k_max]``.

        Each ``k`` is followed by its negative-frequency partner ``N-k``. Index 0
        and, for even N, the Nyquist index ``N/2`` have no distinct partner and
        appear once.
        """
        k_min, k_max = self._check_band(k_min, k_max)
        N = self.size()
        out: List[int] = []
        for k in range(k_min, k_max + 1):
            out.append(k)
            if k > 0 and N - k != k:
                out.append(N - k)
        return out

    def clamp_band(self, k_min: int, k_max: int) -> Tuple[int, int]:
        """Clamp a requested band into ``[0, max_frequency]``.

        The queries never clamp on their own; this is for callers carrying a band
        over from a different signal.
        """
        max_k = self.max_frequency()
        hi = min(max(int(k_max), 0), max_k)
        lo = min(max(int(k_min), 0), hi)
        return lo, hi

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    def filtered_range(self, k_min: int, k_max: int) -> np.ndarray:
        """Reconstruct the signal from frequencies ``k_min..k_max`` and their mirrors.

        ``filtered_range(0, max_frequency())`` reproduces :meth:`original`.

        Raises
        ------
        InvalidRangeError
            ``k_min > k_max``, ``k_min < 0`` or ``k_max > max_frequency()``.
        """
        ks = np.asarray(self.band_indices(k_min, k_max), dtype=np.int64)
        N = self.size()
        i = np.arange(N, dtype=np.int64)
        phase = np.outer(i, ks) % N
        basis = np.exp(2j * np.pi * phase / float(N))
        return basis @ self._coeff[ks]

    def power_spectrum(self) -> np.ndarray:
        """``|c[k]|^2`` in natural index order (0, positive, then negative block)."""
        return np.abs(self._coeff) ** 2

    def signed_frequencies(self) -> np.ndarray:
        """Signed frequency label of each coefficient index.

        Indices up to ``max_frequency()`` keep their value, the rest map ``N-k``
        to ``-k``. For even N the Nyquist index is labelled ``+N/2``.
        """
        N = self.size()
        k = np.arange(N, dtype=int)
        return np.where(k <= N // 2, k, k - N)

    def centered_power_spectrum(self) -> Tuple[np.ndarray, np.ndarray]:
        """Power spectrum rotated so frequency 0 sits in the middle.

        Returns
        -------
        (frequencies, powers)
            Ascending signed frequencies and the matching powers.
        """
        freqs = self.signed_frequencies()
        order = np.argsort(freqs, kind="stable")
        return freqs[order], self.power_spectrum()[order]

    def get_component(self, frequency: int, time_step) -> complex:
        """Epicycle vector of one frequency at one sample position.

        Returns ``c[frequency] * exp(+2*pi*j*frequency*time_step/N)``.

        Raises
        ------
        FrequencyOutOfBoundsError
            ``frequency`` is not in ``0..N-1``.
        """
        N = self.size()
        f = _as_index(frequency, FrequencyOutOfBoundsError, "frequency")
        if f < 0 or f >= N:
            raise FrequencyOutOfBoundsError(f"Frequency {f} out of bounds (valid 0..{N - 1})")
        angle = 2.0 * np.pi * ((f * time_step) % N) / float(N)
        return complex(self._coeff[f] * np.exp(1j * angle))


def spectrum_table(engine: SpectralEngine, *, centered: bool = False) -> pd.DataFrame:
    """Tabulate the coefficients of ``engine``.

    Columns: ``index``, ``frequency`` (signed), ``re``, ``im``, ``amplitude``,
    ``phase_rad``, ``power``. Rows follow index order, or ascending signed
    frequency when ``centered`` is True.
    """
    c = engine.coefficients
    df = pd.DataFrame(
        {
            "index": np.arange(c.size, dtype=int),
            "frequency": engine.signed_frequencies(),
            "re": c.real,
            "im": c.imag,
            "amplitude": np.abs(c),
            "phase_rad": np.angle(c),
            "power": engine.power_spectrum(),
        }
    )
    if centered:
        df = df.sort_values("frequency", kind="stable").reset_index(drop=True)
    return df
