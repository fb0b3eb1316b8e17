from __future__ import annotations

from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass(frozen=True)
class EpicycleVector:
    """One arrow of the epicycle chain, in the complex plane.

    ``start`` is the running sum before this frequency was added and ``end`` the
    running sum after it.
    """

    frequency: int
    start: complex
    end: complex

    @property
    def delta(self) -> complex:
        return self.end - self.start

    @property
    def radius(self) -> float:
        return float(abs(self.end - self.start))


@dataclass(frozen=True)
class EpicycleFrame:
    """Everything the renderer needs for one animation instant.

    Notes
    - ``original`` is the full signal held by the engine (centered if the engine
      centers).
    - ``reconstruction`` is the band-limited curve truncated at ``current_point``.
    - ``tip`` is the end of the last vector, i.e. the reconstructed value at
      ``current_point``.
    """

    current_point: int
    position: float
    original: np.ndarray
    reconstruction: np.ndarray
    vectors: Tuple[EpicycleVector, ...]
    tip: complex

    @property
    def n_vectors(self) -> int:
        return len(self.vectors)

    @staticmethod
    def xy(z: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
        """Split a complex array into ``(x, y)`` float arrays."""
        z = np.asarray(z, dtype=np.complex128)
        return z.real.copy(), z.imag.copy()
