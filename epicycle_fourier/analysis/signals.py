"""Example signals for the epicycle demo.

Every generator is deterministic and returns a 1D numpy array sampled on the
index grid ``i = 0..n-1``. Real signals are float64; closed 2-D curves are
complex128 with ``x = real`` and ``y = imag``.
"""

from __future__ import annotations

from typing import Callable, Dict, Optional

import numpy as np


def _cycles(n: int, cycles: float = 1.0) -> np.ndarray:
    """Elapsed periods at each sample, ``cycles * i / n``."""
    n = int(n)
    if n <= 0:
        raise ValueError(f"n must be > 0, got {n}")
    return float(cycles) * np.arange(n, dtype=np.float64) / float(n)


def _phase(n: int, cycles: float = 1.0) -> np.ndarray:
    return 2.0 * np.pi * _cycles(n, cycles)


def step_signal(n: int = 500, lo: int = 150, hi: int = 350) -> np.ndarray:
    """Unit pulse: 1 for ``lo < i < hi``, 0 elsewhere."""
    n = int(n)
    if n <= 0:
        raise ValueError(f"n must be > 0, got {n}")
    i = np.arange(n)
    return ((i > lo) & (i < hi)).astype(np.float64)


def sine_signal(n: int = 500, cycles: float = 3.0) -> np.ndarray:
    return np.sin(_phase(n, cycles))


def square_signal(n: int = 500, cycles: float = 3.0) -> np.ndarray:
    """Square wave: +1 on the first half of each period, -1 on the second."""
    return np.where(_cycles(n, cycles) % 1.0 < 0.5, 1.0, -1.0)


def triangle_signal(n: int = 500, cycles: float = 3.0) -> np.ndarray:
    """Triangle wave in [-1, 1], peaking a quarter period in like the sine."""
    frac = (_cycles(n, cycles) + 0.25) % 1.0
    return 1.0 - 4.0 * np.abs(frac - 0.5)


def circle_curve(n: int = 200, radius: float = 1.0) -> np.ndarray:
    return float(radius) * np.exp(1j * _phase(n))


def heart_curve(n: int = 400, scale: float = 0.6) -> np.ndarray:
    """Classic parametric heart, scaled to fit roughly within [-10, 10]^2."""
    t = _phase(n)
    x = 16.0 * np.sin(t) ** 3
    y = 13.0 * np.cos(t) - 5.0 * np.cos(2 * t) - 2.0 * np.cos(3 * t) - np.cos(4 * t)
    return float(scale) * (x + 1j * y)


EXAMPLES: Dict[str, Callable[..., np.ndarray]] = {
    "step": step_signal,
    "sine": sine_signal,
    "square": square_signal,
    "triangle": triangle_signal,
    "circle": circle_curve,
    "heart": heart_curve,
}


def example_signal(name: str, n: Optional[int] = None) -> np.ndarray:
    """Look up an example by name, optionally overriding its sample count."""
    try:
        gen = EXAMPLES[name]
    except KeyError:
        raise KeyError(f"Unknown example {name!r}; known: {sorted(EXAMPLES)}") from None
    return gen() if n is None else gen(n)
