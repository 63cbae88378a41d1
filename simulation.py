"""
Flow-field particle animation.

This module defines the :class:`Simulation` that owns all animation state:
the flow field, the particle swarm, the colour-injection registry, the
global hue drift and the noise time axis.  The host calls :meth:`step` once
per display refresh; pointer clicks and window resizes reported in between
are queued and applied at the start of the next frame, so a frame always
sees a consistent canvas.

Per frame, in order:

1. fade the canvas with a translucent overlay (motion ghosting),
2. rebuild the flow field for the current noise time and pointer,
3. move, wrap, colour and draw every particle in creation order,
4. advance the noise time,
5. jitter the hue drift if the pointer moved since the last frame.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, List, Optional, Tuple

import numpy as np
from numpy import ndarray

from color_injection import ColorInjectionRegistry, wrap_hue
from config import SimulationSettings
from flow_field import FlowField
from particle import ParticleSwarm

if TYPE_CHECKING:
    from noise_source import NoiseSource
    from renderer import Renderer

logger = logging.getLogger(__name__)


class Simulation:
    """Evolve a swarm of particles through a noise-driven flow field.

    Parameters
    ----------
    renderer: Renderer
        Canvas to draw on; also reports size and pointer and delivers
        click/resize events.
    noise: NoiseSource
        Coherent noise sampled by the flow field.
    settings: SimulationSettings, optional
        Tunables; defaults are used when omitted.
    rng: numpy.random.Generator, optional
        Randomness for spawn positions, injected hues and hue drift.  Pass a
        seeded generator for reproducible runs.
    """

    def __init__(
        self,
        renderer: 'Renderer',
        noise: 'NoiseSource',
        settings: Optional[SimulationSettings] = None,
        rng: Optional[np.random.Generator] = None,
    ):
        self.renderer = renderer
        self.noise = noise
        self.settings = settings if settings is not None else SimulationSettings()
        self.rng = rng if rng is not None else np.random.default_rng()
        cfg = self.settings

        width, height = renderer.canvas_size()
        self.field = FlowField(
            width,
            height,
            resolution=cfg.resolution,
            noise_scale=cfg.noise_scale,
            turns=cfg.noise_turns,
            interaction_radius=cfg.interaction_radius,
            repulsion=cfg.repulsion,
            boosted_magnitude=cfg.boosted_magnitude,
        )
        self.injections = ColorInjectionRegistry(
            max_injections=cfg.max_injections,
            radius=cfg.injection_radius,
            rng=self.rng,
        )
        self.particles = ParticleSwarm(
            self.rng.uniform((0.0, 0.0), (width, height), size=(cfg.particle_count, 2)),
            max_speed=cfg.max_speed,
            max_history=cfg.max_history,
        )

        self.hue_shift: float = 0.0
        self.time_offset: float = 0.0
        self.frame_no: int = 0
        self._prev_pointer: Optional[Tuple[float, float]] = renderer.pointer_position()
        self._pending_clicks: List[Tuple[float, float]] = []
        self._pending_size: Optional[Tuple[int, int]] = None

        renderer.on_click(self.handle_click)
        renderer.on_resize(self.handle_resize)
        renderer.clear_or_fade(cfg.background, 1.0)
        logger.info(
            "simulation started: %d particles, %dx%d field cells",
            len(self.particles), self.field.cols, self.field.rows,
        )

    # ------------------------------------------------------------------ Events
    def handle_click(self, position: Tuple[float, float]) -> None:
        """Queue a colour injection at ``position`` for the next frame."""
        self._pending_clicks.append((float(position[0]), float(position[1])))

    def handle_resize(self, size: Tuple[int, int]) -> None:
        """Queue a flow-field reallocation for the new canvas ``size``."""
        self._pending_size = (int(size[0]), int(size[1]))

    def _apply_pending_events(self) -> None:
        if self._pending_size is not None:
            width, height = self._pending_size
            self._pending_size = None
            self.field.resize(width, height)
            self.renderer.clear_or_fade(self.settings.background, 1.0)
            logger.info("flow field reallocated to %dx%d cells", self.field.cols, self.field.rows)
        clicks, self._pending_clicks = self._pending_clicks, []
        for x, y in clicks:
            self.injections.inject((x, y))

    # ------------------------------------------------------------------ Frame
    def particle_base_hue(self, index: int) -> float:
        return float(self.particle_base_hues()[index])

    def particle_base_hues(self) -> ndarray:
        """Palette hue of every particle before colour injections."""
        cfg = self.settings
        offsets = np.arange(len(self.particles)) * cfg.hue_per_particle
        return wrap_hue(cfg.base_hue + self.hue_shift + offsets)

    def step(self) -> None:
        """Advance and draw one frame."""
        self._apply_pending_events()
        cfg = self.settings
        renderer = self.renderer
        width, height = renderer.canvas_size()
        pointer = renderer.pointer_position()

        renderer.clear_or_fade(cfg.background, cfg.fade_alpha)
        self.field.rebuild(self.noise, self.time_offset, pointer)

        injections = tuple(self.injections)
        swarm = self.particles
        swarm.follow(self.field)
        swarm.update()
        swarm.edges(width, height)
        hues = swarm.compute_display_hues(self.particle_base_hues(), injections, cfg.particle_blend)
        swarm.display(
            renderer,
            hues,
            injections,
            saturation=cfg.saturation,
            brightness=cfg.brightness,
            trail_strength=cfg.trail_blend,
        )

        self.time_offset += cfg.time_step
        self._drift_hue(pointer)
        self.frame_no += 1

    def _drift_hue(self, pointer: Optional[Tuple[float, float]]) -> None:
        """Random-walk the hue shift, but only on frames where the pointer moved.

        A pointer appearing or disappearing (``None`` on either side) is not
        movement.
        """
        previous, self._prev_pointer = self._prev_pointer, pointer
        if pointer is None or previous is None or pointer == previous:
            return
        jitter = self.settings.hue_jitter
        self.hue_shift = float(wrap_hue(self.hue_shift + self.rng.uniform(-jitter, jitter)))

    # -------------------------------------------------------------------------
    def __iter__(self) -> 'Simulation':
        return self

    def __next__(self) -> int:
        """Run one frame and return the number of frames rendered so far."""
        self.step()
        return self.frame_no
