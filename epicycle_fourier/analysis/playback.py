"""Animation stepping state machine for epicycle playback.

A :class:`PlaybackController` owns a fractional playback position over the
sample domain of one :class:`~epicycle_fourier.analysis.spectral.SpectralEngine`.
Each host frame calls :meth:`PlaybackController.step` with the measured elapsed
time; the controller advances the position and builds an
:class:`~epicycle_fourier.models.frames.EpicycleFrame` for the renderer.

The controller never draws and never reads a clock. The host supplies both:

- a renderer callable receiving each frame,
- an optional frame scheduler with ``start_loop()`` / ``stop_loop()``,
- an optional error sink receiving a message string per failed tick.
"""

from __future__ import annotations

import enum
import math
from typing import Callable, List, Optional, Protocol, Tuple

import numpy as np

from epicycle_fourier.analysis.spectral import SpectralEngine, SpectralError
from epicycle_fourier.models.frames import EpicycleFrame, EpicycleVector
from epicycle_fourier.models.profile import PlaybackProfile


class PlaybackState(enum.Enum):
    STOPPED = "stopped"
    PAUSED = "paused"
    PLAYING = "playing"


class TickHandler(Protocol):
    """Anything the host frame clock can drive."""

    def on_tick(self, elapsed: float) -> None: ...


class FrameScheduler(Protocol):
    """Host clock that can be told to start/stop issuing ticks."""

    def start_loop(self) -> None: ...

    def stop_loop(self) -> None: ...


Renderer = Callable[[EpicycleFrame], None]
ErrorSink = Callable[[str], None]


class PlaybackController:
    """Drive a continuously advancing index into an engine's sample domain.

    Parameters
    ----------
    engine:
        The signal's spectral engine. One controller is bound to one engine for
        its whole life.
    k_min, k_max:
        Frequency band drawn each frame. ``k_max=None`` selects the full band.
        The band is stored as given; an out-of-range band fails at tick time.
    speed:
        Sample-index units per unit of elapsed time (negative plays backwards).
    closed:
        Closed (cyclic) curves draw the reconstruction up to ``current_point``;
        open ones one sample further.
    renderer, scheduler, on_error:
        Host collaborators, all optional.
    """

    def __init__(
        self,
        engine: SpectralEngine,
        *,
        k_min: int = 0,
        k_max: Optional[int] = None,
        speed: float = 1.0,
        speed_factor: float = 1.5,
        closed: bool = True,
        renderer: Optional[Renderer] = None,
        scheduler: Optional[FrameScheduler] = None,
        on_error: Optional[ErrorSink] = None,
    ) -> None:
        self._engine = engine
        self._k_min = k_min
        self._k_max = engine.max_frequency() if k_max is None else k_max
        self._recon: Optional[np.ndarray] = None
        self._speed = 1.0
        self.set_speed(speed)
        if not (math.isfinite(speed_factor) and speed_factor > 1.0):
            raise ValueError(f"speed_factor must be > 1, got {speed_factor}")
        self._speed_factor = float(speed_factor)
        self._closed = bool(closed)

        self._position = 0.0
        self._state = PlaybackState.STOPPED

        self.renderer = renderer
        self.scheduler = scheduler
        self.on_error = on_error
        self.last_error: Optional[str] = None

    # ------------------------------------------------------------------
    # Factories
    # ------------------------------------------------------------------

    @classmethod
    def from_profile(cls, engine: SpectralEngine, profile: PlaybackProfile, **host) -> PlaybackController:
        """Build a controller from a profile, clamping its band to ``engine``."""
        p = profile.with_band_clamped(engine.max_frequency())
        return cls(
            engine,
            k_min=p.k_min,
            k_max=p.k_max,
            speed=p.speed,
            speed_factor=p.speed_factor,
            closed=p.closed,
            **host,
        )

    @classmethod
    def for_signal(
        cls,
        engine: SpectralEngine,
        previous: Optional[PlaybackController] = None,
        profile: Optional[PlaybackProfile] = None,
        **host,
    ) -> PlaybackController:
        """Build the controller replacing ``previous`` after a signal change.

        Speed, speed factor, closedness and band carry over from ``previous``
        (else from ``profile``, else defaults). The band is clamped to the new
        engine before first use. ``previous`` is stopped.
        """
        if previous is None:
            return cls.from_profile(engine, profile or PlaybackProfile(), **host)

        previous.stop()
        k_min, k_max = engine.clamp_band(*previous.band)
        for key in ("renderer", "scheduler", "on_error"):
            host.setdefault(key, getattr(previous, key))
        return cls(
            engine,
            k_min=k_min,
            k_max=k_max,
            speed=previous.speed,
            speed_factor=previous.speed_factor,
            closed=previous.closed,
            **host,
        )

    # ------------------------------------------------------------------
    # Properties
    # ------------------------------------------------------------------

    @property
    def engine(self) -> SpectralEngine:
        return self._engine

    @property
    def state(self) -> PlaybackState:
        return self._state

    @property
    def position(self) -> float:
        return self._position

    @property
    def current_point(self) -> int:
        N = self._engine.size()
        return (N + int(math.floor(self._position))) % N

    @property
    def speed(self) -> float:
        return self._speed

    @property
    def speed_factor(self) -> float:
        return self._speed_factor

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def band(self) -> Tuple[int, int]:
        return self._k_min, self._k_max

    def is_paused(self) -> bool:
        """True whenever the position is not advancing (paused or stopped)."""
        return self._state is not PlaybackState.PLAYING

    def is_stopped(self) -> bool:
        return self._state is PlaybackState.STOPPED

    def is_playing(self) -> bool:
        return self._state is PlaybackState.PLAYING

    # ------------------------------------------------------------------
    # Control
    # ------------------------------------------------------------------

    def start(self) -> None:
        """Begin playing and ask the scheduler for ticks."""
        if self.scheduler is not None:
            self.scheduler.start_loop()
        self._state = PlaybackState.PLAYING

    def stop(self) -> None:
        """Stop playback and rewind to sample 0. Safe in every state."""
        if self.scheduler is not None:
            self.scheduler.stop_loop()
        self._state = PlaybackState.STOPPED
        self._position = 0.0

    def play(self) -> None:
        """Resume from PAUSED. Ignored when stopped; use :meth:`start` there."""
        if self._state is PlaybackState.PAUSED:
            self._state = PlaybackState.PLAYING

    def pause(self) -> None:
        if self._state is PlaybackState.PLAYING:
            self._state = PlaybackState.PAUSED

    def toggle(self) -> PlaybackState:
        """Play/pause button: start when stopped, otherwise flip play and pause."""
        if self._state is PlaybackState.STOPPED:
            self.start()
        elif self._state is PlaybackState.PLAYING:
            self.pause()
        else:
            self.play()
        return self._state

    def set_speed(self, speed: float) -> None:
        speed = float(speed)
        if not math.isfinite(speed):
            raise ValueError(f"speed must be finite, got {speed}")
        self._speed = speed

    def speed_up(self, factor: Optional[float] = None) -> float:
        self.set_speed(self._speed * (self._speed_factor if factor is None else float(factor)))
        return self._speed

    def slow_down(self, factor: Optional[float] = None) -> float:
        self.set_speed(self._speed / (self._speed_factor if factor is None else float(factor)))
        return self._speed

    def set_band(self, k_min: int, k_max: int) -> None:
        self._k_min = k_min
        self._k_max = k_max
        self._recon = None

    # ------------------------------------------------------------------
    # Ticking
    # ------------------------------------------------------------------

    def on_tick(self, elapsed: float) -> None:
        self.step(elapsed)

    def step(self, elapsed: float) -> Optional[EpicycleFrame]:
        """Advance by ``speed * elapsed`` and render the resulting frame.

        Returns the frame handed to the renderer, or None when not playing or
        when the band query failed (the failure is reported, playback goes on).
        """
        if self._state is not PlaybackState.PLAYING:
            return None
        elapsed = float(elapsed)
        if not math.isfinite(elapsed):
            raise ValueError(f"elapsed must be finite, got {elapsed}")

        N = self._engine.size()
        self._position += self._speed * elapsed
        if self._position < 0.0:
            self._position = float(N)
        elif self._position >= N:
            self._position -= N * math.floor(self._position / N)

        try:
            frame = self.frame_at(self.current_point)
        except SpectralError as exc:
            self._report(f"Skipping frame at position {self._position:.3f}: {exc}")
            return None

        self.last_error = None
        if self.renderer is not None:
            self.renderer(frame)
        return frame

    def _reconstruction(self) -> np.ndarray:
        # The band reconstruction does not depend on the position; built once per band.
        if self._recon is None:
            recon = self._engine.filtered_range(self._k_min, self._k_max)
            recon.setflags(write=False)
            self._recon = recon
        return self._recon

    def frame_at(self, current_point: int) -> EpicycleFrame:
        """Build the frame for an explicit sample index without touching state.

        Raises
        ------
        SpectralError
            The stored band is invalid for the engine.
        """
        engine = self._engine
        N = engine.size()
        cp = int(current_point) % N

        recon = self._reconstruction()
        n_keep = cp + 1 if self._closed else cp + 2
        partial = recon[: min(n_keep, N)]

        vectors: List[EpicycleVector] = []
        acc = 0j
        for k in engine.band_indices(self._k_min, self._k_max):
            nxt = acc + engine.get_component(k, cp)
            vectors.append(EpicycleVector(frequency=k, start=acc, end=nxt))
            acc = nxt

        return EpicycleFrame(
            current_point=cp,
            position=self._position,
            original=engine.original(),
            reconstruction=np.asarray(partial),
            vectors=tuple(vectors),
            tip=acc,
        )

    def _report(self, message: str) -> None:
        self.last_error = message
        if self.on_error is not None:
            self.on_error(message)
