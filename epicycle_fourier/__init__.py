"""Epicycle Fourier -- watch a signal being rebuilt from a truncated Fourier series.

A 1-D real signal, or a closed 2-D curve packed as complex samples ``x + iy``,
is decomposed with a direct discrete Fourier transform. The reconstruction is
animated as a chain of rotating vectors (epicycles) whose tip traces the
band-limited curve.

Main subpackages:
- analysis: SpectralEngine (DFT, band reconstruction, spectrum), PlaybackController
  (animation state machine), example signals
- models: Frame and vector data models, PlaybackProfile configuration
- gui: ipywidgets/Matplotlib notebook host (frame clock, drawing surface, log)
"""

__all__ = []
