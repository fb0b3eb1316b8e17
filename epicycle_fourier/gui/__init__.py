"""GUI package - notebook host for the epicycle animation.

Entry point:
    from epicycle_fourier.gui.app import build_animation_gui
    session = build_animation_gui("heart")
    display(session.widget)

The host supplies what the analysis core leaves out: the frame clock
(``PlayClock``), the drawing surface (``MatplotlibSurface`` / ``FrameRenderer``)
and the error sink (``HtmlLog``).
"""
