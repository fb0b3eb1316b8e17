"""
Drawing surface and frame renderer (Matplotlib).

The analysis core hands over frames in the signal's native coordinates; this
module is the only place that knows about axes, colors and line widths.

- Real 1-D signals are drawn against the sample index (x = i, y = value).
- Complex signals are drawn as curves in the plane (x = real, y = imag).
- The epicycle chain always lives in the complex plane.
"""

from __future__ import annotations

from typing import Optional, Sequence, Tuple

import numpy as np

from epicycle_fourier.analysis.spectral import SpectralEngine
from epicycle_fourier.models.frames import EpicycleFrame


COLOR_ORIGINAL = "tab:blue"
COLOR_RECONSTRUCTED = "tab:orange"
COLOR_VECTOR = "tab:green"
COLOR_TIP = "tab:red"

LINE_WIDTH_ORIGINAL = 1.0
LINE_WIDTH_RECONSTRUCTED = 2.0
ARROW_WIDTH = 2.0


class MatplotlibSurface:
    """Polyline/arrow drawing primitives on one Matplotlib Axes."""

    def __init__(self, ax, *, limits: Optional[Tuple[float, float, float, float]] = None) -> None:
        self.ax = ax
        self.limits = limits

    def clear(self) -> None:
        self.ax.cla()
        if self.limits is not None:
            x0, x1, y0, y1 = self.limits
            self.ax.set_xlim(x0, x1)
            self.ax.set_ylim(y0, y1)

    def polyline(self, points: Sequence[complex], color: str, width: float):
        z = np.asarray(points, dtype=np.complex128)
        (line,) = self.ax.plot(z.real, z.imag, color=color, linewidth=width)
        return line

    def arrow(self, start: complex, end: complex, color: str, width: float):
        return self.ax.annotate(
            "",
            xy=(end.real, end.imag),
            xytext=(start.real, start.imag),
            arrowprops=dict(arrowstyle="->", color=color, linewidth=width),
        )

    def marker(self, point: complex, color: str, size: float = 5.0):
        (line,) = self.ax.plot([point.real], [point.imag], "o", color=color, markersize=size)
        return line


def _as_curve(z: np.ndarray, real_signal: bool) -> np.ndarray:
    """Map samples to plane points; real signals become ``i + 1j*value``."""
    z = np.asarray(z, dtype=np.complex128)
    if real_signal:
        return np.arange(z.size, dtype=np.float64) + 1j * z.real
    return z


def _auto_limits(z: np.ndarray, margin: float = 0.15) -> Tuple[float, float, float, float]:
    x0, x1 = float(np.min(z.real)), float(np.max(z.real))
    y0, y1 = float(np.min(z.imag)), float(np.max(z.imag))
    span = max(x1 - x0, y1 - y0, 1e-9)
    pad = margin * span
    return x0 - pad, x1 + pad, y0 - pad, y1 + pad


class FrameRenderer:
    """Renderer callable for :class:`PlaybackController`.

    For complex signals the curve, reconstruction and chain share one axes. For
    real signals the curves are drawn against the index on ``surface`` and the
    chain goes to ``chain_surface`` (if given).
    """

    def __init__(self, surface: MatplotlibSurface, *, real_signal: bool = False,
                 chain_surface: Optional[MatplotlibSurface] = None) -> None:
        self.surface = surface
        self.chain_surface = chain_surface
        self.real_signal = bool(real_signal)
        self.n_rendered = 0

    def __call__(self, frame: EpicycleFrame) -> None:
        s = self.surface
        s.clear()
        s.polyline(_as_curve(frame.original, self.real_signal), COLOR_ORIGINAL, LINE_WIDTH_ORIGINAL)
        s.polyline(_as_curve(frame.reconstruction, self.real_signal), COLOR_RECONSTRUCTED, LINE_WIDTH_RECONSTRUCTED)

        chain = s if not self.real_signal else self.chain_surface
        if chain is not None:
            if chain is not s:
                chain.clear()
            for v in frame.vectors:
                chain.arrow(v.start, v.end, COLOR_VECTOR, ARROW_WIDTH)
            chain.marker(frame.tip, COLOR_TIP)
        if self.real_signal:
            s.marker(complex(frame.current_point, frame.tip.real), COLOR_TIP)

        canvas = getattr(s.ax.figure, "canvas", None)
        if canvas is not None:
            canvas.draw_idle()
        self.n_rendered += 1


def limits_for(engine: SpectralEngine) -> Tuple[float, float, float, float]:
    """Fixed view limits for a signal, so the frame does not jump while playing."""
    return _auto_limits(_as_curve(engine.original(), engine.is_real()))


def plot_band_view(ax, engine: SpectralEngine, k_min: int, k_max: int) -> None:
    """Static comparison of the original and its band-limited reconstruction."""
    recon = engine.filtered_range(k_min, k_max)
    real = engine.is_real()
    ax.cla()
    a = _as_curve(engine.original(), real)
    b = _as_curve(recon, real)
    ax.plot(a.real, a.imag, color=COLOR_ORIGINAL, linewidth=LINE_WIDTH_ORIGINAL, label="original")
    ax.plot(b.real, b.imag, color=COLOR_RECONSTRUCTED, linewidth=LINE_WIDTH_RECONSTRUCTED,
            label=f"band [{k_min}, {k_max}]")
    ax.set_xlabel("sample index" if real else "x")
    ax.set_ylabel("value" if real else "y")
    ax.legend(loc="upper right")


def plot_power_spectrum(ax, engine: SpectralEngine, *, centered: bool = True) -> None:
    if centered:
        freqs, powers = engine.centered_power_spectrum()
    else:
        freqs, powers = np.arange(engine.size()), engine.power_spectrum()
    ax.cla()
    ax.stem(freqs, powers)
    ax.set_xlabel("frequency" if centered else "coefficient index")
    ax.set_ylabel("|c|^2")
