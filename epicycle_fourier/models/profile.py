"""Playback profile -- bundles every parameter that shapes an animation.

A PlaybackProfile groups the playback configuration into one frozen dataclass.
It can be:

- Overridden field-by-field via ``dataclasses.replace()``
- Clamped to the band limits of a particular signal
- Serialized to/from a dict for JSON round trips
"""

from __future__ import annotations

import math
from dataclasses import asdict, dataclass, replace
from typing import Any, Dict, Optional


@dataclass(frozen=True)
class PlaybackProfile:
    """Frozen configuration for a playback session.

    Fields
    ------
    speed : float
        Initial playback speed in sample-index units per second. Negative values
        play in reverse.
    speed_factor : float
        Multiplier applied by "faster" and divisor applied by "slower". Must be
        greater than 1 so speed changes stay proportional at every magnitude.
    k_min, k_max : int
        Frequency band drawn each frame. ``k_max=None`` means the full band of
        whatever signal is loaded.
    center : bool
        Subtract the signal mean before transforming.
    closed : bool
        True for cyclic signals (closed curves). Open signals draw the partial
        reconstruction one sample further.
    frame_interval_ms : int
        Nominal period of the host frame clock. The controller itself trusts
        only the measured elapsed time.
    """

    speed: float = 1.0
    speed_factor: float = 1.5
    k_min: int = 0
    k_max: Optional[int] = None
    center: bool = False
    closed: bool = True
    frame_interval_ms: int = 16

    def __post_init__(self) -> None:
        if not math.isfinite(self.speed):
            raise ValueError(f"speed must be finite, got {self.speed}")
        if not (math.isfinite(self.speed_factor) and self.speed_factor > 1.0):
            raise ValueError(f"speed_factor must be > 1, got {self.speed_factor}")
        if self.k_min < 0:
            raise ValueError(f"k_min must be >= 0, got {self.k_min}")
        if self.k_max is not None and self.k_max < self.k_min:
            raise ValueError(f"k_max must be >= k_min, got [{self.k_min}, {self.k_max}]")
        if self.frame_interval_ms <= 0:
            raise ValueError(f"frame_interval_ms must be > 0, got {self.frame_interval_ms}")

    def with_band_clamped(self, max_frequency: int) -> PlaybackProfile:
        """Return a copy whose band fits in ``[0, max_frequency]``."""
        max_frequency = int(max_frequency)
        hi = max_frequency if self.k_max is None else min(self.k_max, max_frequency)
        lo = min(self.k_min, hi)
        return replace(self, k_min=lo, k_max=hi)

    # ------------------------------------------------------------------
    # Serialization
    # ------------------------------------------------------------------

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, d: Dict[str, Any]) -> PlaybackProfile:
        """Reconstruct from a dict (e.g. loaded from JSON). Unknown keys are rejected."""
        d = dict(d)
        known = set(cls.__dataclass_fields__)
        extra = sorted(set(d) - known)
        if extra:
            raise ValueError(f"Unknown PlaybackProfile fields: {extra}")
        return cls(**d)
