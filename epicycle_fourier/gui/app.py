from __future__ import annotations

import time
from dataclasses import dataclass, field
from typing import Callable, Optional, Tuple

import ipywidgets as w
from IPython.display import display

from epicycle_fourier.analysis.playback import PlaybackController, TickHandler
from epicycle_fourier.analysis.signals import EXAMPLES, example_signal
from epicycle_fourier.analysis.spectral import SpectralEngine, SpectralError
from epicycle_fourier.models.profile import PlaybackProfile
from .log_view import HtmlLog
from .renderer import FrameRenderer, MatplotlibSurface, limits_for, plot_band_view, plot_power_spectrum


def _try_enable_interactive_backend() -> Tuple[bool, str]:
    """
    Try to enable a Matplotlib backend that redraws in place inside Jupyter.

    Returns:
        (ok, message)
    """
    import matplotlib as mpl

    try:
        import ipympl  # noqa: F401
        mpl.use("module://ipympl.backend_nbagg", force=True)
        return True, "Interactive backend: ipympl widget."
    except Exception as exc:
        return False, f"Interactive backend unavailable (redrawing as static images): {exc}"


class PlayClock:
    """Host frame clock built on an ``ipywidgets.Play`` widget.

    Every value change of the Play widget counts as one display frame. The
    wall-clock delta since the previous frame is measured with
    ``time.perf_counter`` and passed to the handler's ``on_tick``; the first
    frame after a start reports 0.
    """

    def __init__(self, interval_ms: int = 16, *, now: Callable[[], float] = time.perf_counter) -> None:
        self.widget = w.Play(value=0, min=0, max=1_000_000, step=1, interval=int(interval_ms),
                             repeat=True, show_repeat=False, layout=w.Layout(display="none"))
        self.handler: Optional[TickHandler] = None
        self._now = now
        self._last: Optional[float] = None
        self.widget.observe(self._on_frame, names="value")

    @property
    def running(self) -> bool:
        return bool(self.widget.playing)

    def start_loop(self) -> None:
        self._last = None
        self.widget.playing = True

    def stop_loop(self) -> None:
        self.widget.playing = False
        self._last = None

    def tick(self) -> float:
        """Deliver one frame to the handler and return the elapsed time used."""
        t = self._now()
        elapsed = 0.0 if self._last is None else t - self._last
        self._last = t
        if self.handler is not None:
            self.handler.on_tick(elapsed)
        return elapsed

    def _on_frame(self, _change) -> None:
        if self.running:
            self.tick()


@dataclass
class AnimationSession:
    """Caller-held handle of one animation GUI (widget, controller, log, clock)."""

    widget: w.Widget
    log: HtmlLog
    clock: PlayClock
    profile: PlaybackProfile
    controller: Optional[PlaybackController] = None
    example: Optional[str] = None
    figure: object = None
    controls: dict = field(default_factory=dict)


def build_animation_gui(
    example: str = "heart",
    *,
    profile: Optional[PlaybackProfile] = None,
    interactive: bool = False,
) -> AnimationSession:
    """
    Epicycle animation GUI (Jupyter / VSCode notebooks).

    Returns an :class:`AnimationSession`; call ``display(session.widget)`` to
    show it. Nothing is kept at module level, so several sessions can coexist.

    Controls: example, k_min/k_max band, play/pause, stop, slower, faster.
    Changing the example or the band replaces the engine/controller pair, with
    the band clamped to the new signal.
    """
    profile = profile or PlaybackProfile()
    log = HtmlLog(title="Log")

    if interactive:
        ok, msg = _try_enable_interactive_backend()
        (log.info if ok else log.warning)(msg)
        import matplotlib.pyplot as plt  # backend must be configured first
        fig = plt.figure(figsize=(10, 4.5))
    else:
        from matplotlib.figure import Figure
        fig = Figure(figsize=(10, 4.5))
    ax_curve = fig.add_subplot(1, 2, 1)
    ax_chain = fig.add_subplot(1, 2, 2)

    clock = PlayClock(profile.frame_interval_ms)
    out = w.Output(layout=w.Layout(border="1px solid #ddd", padding="4px"))

    dd_example = w.Dropdown(options=list(EXAMPLES), value=example, description="Example",
                            layout=w.Layout(width="220px"))
    k_min_box = w.BoundedIntText(value=profile.k_min, min=0, max=1_000_000, description="k_min",
                                 layout=w.Layout(width="150px"))
    k_max_box = w.BoundedIntText(value=profile.k_max if profile.k_max is not None else 0, min=0,
                                 max=1_000_000, description="k_max", layout=w.Layout(width="150px"))
    btn_toggle = w.Button(description="Play / Pause", button_style="primary")
    btn_stop = w.Button(description="Stop", button_style="warning")
    btn_slower = w.Button(description="Slower")
    btn_faster = w.Button(description="Faster")
    status = w.HTML()

    session = AnimationSession(
        widget=w.VBox([]),
        log=log,
        clock=clock,
        profile=profile,
        figure=fig,
        controls={
            "example": dd_example,
            "k_min": k_min_box,
            "k_max": k_max_box,
            "toggle": btn_toggle,
            "stop": btn_stop,
            "slower": btn_slower,
            "faster": btn_faster,
            "status": status,
        },
    )

    def _set_status() -> None:
        c = session.controller
        if c is None:
            status.value = "<b>Status:</b> no signal"
            return
        k_lo, k_hi = c.band
        status.value = (
            f"<b>Status:</b> {c.state.value} | N={c.engine.size()} | band=[{k_lo}, {k_hi}] "
            f"| speed={c.speed:.3g}"
        )

    def _show() -> None:
        if interactive:
            return
        with out:
            out.clear_output(wait=True)
            display(fig)

    def _make_renderer(engine: SpectralEngine) -> Callable[[object], None]:
        real = engine.is_real()
        surface = MatplotlibSurface(ax_curve, limits=limits_for(engine))
        chain = MatplotlibSurface(ax_chain) if real else None
        frame_renderer = FrameRenderer(surface, real_signal=real, chain_surface=chain)

        def _render(frame) -> None:
            frame_renderer(frame)
            if chain is not None:
                ax_chain.set_aspect("equal", adjustable="datalim")
            _show()

        return _render

    def _draw_static(engine: SpectralEngine, k_lo: int, k_hi: int) -> None:
        try:
            plot_band_view(ax_curve, engine, k_lo, k_hi)
        except SpectralError as exc:
            log.error(f"ERROR: {exc}")
            return
        plot_power_spectrum(ax_chain, engine)
        _show()

    syncing = {"active": False}

    def load(name: str) -> None:
        """Replace the engine/controller pair with one for example ``name``."""
        try:
            engine = SpectralEngine.create(example_signal(name), center=profile.center)
        except (KeyError, SpectralError) as exc:
            log.error(f"ERROR: cannot load {name!r}: {exc}")
            if session.controller is not None:
                session.controller.stop()
            session.controller = None
            _set_status()
            return

        host = dict(renderer=_make_renderer(engine), scheduler=clock, on_error=log.error)
        session.controller = PlaybackController.for_signal(
            engine, session.controller, profile, **host
        )
        session.example = name
        clock.handler = session.controller

        k_lo, k_hi = session.controller.band
        # no band callbacks while the boxes are rewritten
        syncing["active"] = True
        try:
            k_max_box.max = engine.max_frequency()
            k_min_box.max = engine.max_frequency()
            k_min_box.value, k_max_box.value = k_lo, k_hi
        finally:
            syncing["active"] = False
        log.info(f"Loaded {name!r}: N={engine.size()}, max_frequency={engine.max_frequency()}")
        _draw_static(engine, k_lo, k_hi)
        _set_status()

    def apply_band(k_lo: int, k_hi: int) -> None:
        c = session.controller
        if c is None:
            return
        c.set_band(k_lo, k_hi)
        if c.is_stopped():
            _draw_static(c.engine, k_lo, k_hi)
        _set_status()

    def _on_example(change) -> None:
        load(change["new"])

    def _on_band(_change) -> None:
        if syncing["active"]:
            return
        apply_band(k_min_box.value, k_max_box.value)

    def _on_toggle(_b) -> None:
        if session.controller is None:
            log.warning("WARNING: no signal loaded")
            return
        session.controller.toggle()
        _set_status()

    def _on_stop(_b) -> None:
        if session.controller is not None:
            session.controller.stop()
            _draw_static(session.controller.engine, *session.controller.band)
        _set_status()

    def _on_slower(_b) -> None:
        if session.controller is not None:
            session.controller.slow_down()
        _set_status()

    def _on_faster(_b) -> None:
        if session.controller is not None:
            session.controller.speed_up()
        _set_status()

    dd_example.observe(_on_example, names="value")
    k_min_box.observe(_on_band, names="value")
    k_max_box.observe(_on_band, names="value")
    btn_toggle.on_click(_on_toggle)
    btn_stop.on_click(_on_stop)
    btn_slower.on_click(_on_slower)
    btn_faster.on_click(_on_faster)

    load(example)

    session.widget.children = [
        w.HBox([dd_example, k_min_box, k_max_box]),
        w.HBox([btn_toggle, btn_stop, btn_slower, btn_faster, clock.widget]),
        status,
        fig.canvas if interactive else out,
        log.panel,
    ]
    session.controls["load"] = load
    session.controls["apply_band"] = apply_band
    return session
