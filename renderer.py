"""
Drawing surface used by the simulation.

:class:`Renderer` is the small set of primitives the simulation needs.
:class:`PygameRenderer` implements it on a pygame window and also owns the
event pump and frame clock used by ``main``.

Colours are HSB: hue in ``[0, 360)``, saturation and brightness in
``[0, 100]``, alpha in ``[0, 1]``.
"""

from __future__ import annotations

import logging
from typing import Callable, List, Optional, Protocol, Tuple

import pygame
import pygame.gfxdraw

logger = logging.getLogger(__name__)

ClickCallback = Callable[[Tuple[int, int]], None]
ResizeCallback = Callable[[Tuple[int, int]], None]
HSB = Tuple[float, float, float]


class Renderer(Protocol):
    def clear_or_fade(self, color: HSB, alpha: float) -> None: ...

    def draw_point(
        self,
        x: float,
        y: float,
        hue: float,
        saturation: float,
        brightness: float,
        alpha: float,
    ) -> None: ...

    def canvas_size(self) -> Tuple[int, int]: ...

    def pointer_position(self) -> Optional[Tuple[int, int]]: ...

    def on_resize(self, callback: ResizeCallback) -> None: ...

    def on_click(self, callback: ClickCallback) -> None: ...


def hsba_to_color(hue: float, saturation: float, brightness: float, alpha: float) -> pygame.Color:
    """Convert HSB(+alpha in ``[0, 1]``) to a :class:`pygame.Color`."""
    color = pygame.Color(0, 0, 0, 0)
    color.hsva = (
        hue % 360.0,
        max(0.0, min(100.0, saturation)),
        max(0.0, min(100.0, brightness)),
        max(0.0, min(100.0, alpha * 100.0)),
    )
    return color


class PygameRenderer:
    """Renderer drawing straight onto a resizable pygame display surface.

    Parameters
    ----------
    size: tuple, optional
        Window size in pixels.  ``None`` uses the current desktop size.
    caption: str
        Window title.
    """

    def __init__(self, size: Optional[Tuple[int, int]] = None, caption: str = "Flow Field"):
        pygame.init()
        if size is None:
            info = pygame.display.Info()
            size = (info.current_w, info.current_h)
        self.screen = pygame.display.set_mode(size, pygame.RESIZABLE)
        pygame.display.set_caption(caption)
        self.clock = pygame.time.Clock()
        self._overlay: Optional[pygame.Surface] = None
        self._click_callbacks: List[ClickCallback] = []
        self._resize_callbacks: List[ResizeCallback] = []
        logger.info("opened %dx%d window", *self.screen.get_size())

    # ------------------------------------------------------------------ Drawing
    def clear_or_fade(self, color: HSB, alpha: float) -> None:
        """Paint ``color`` over the whole canvas; ``alpha < 1`` only dims it."""
        fill = hsba_to_color(color[0], color[1], color[2], alpha)
        if alpha >= 1.0:
            self.screen.fill((fill.r, fill.g, fill.b))
            return
        size = self.screen.get_size()
        if self._overlay is None or self._overlay.get_size() != size:
            self._overlay = pygame.Surface(size, pygame.SRCALPHA)
        self._overlay.fill(fill)
        self.screen.blit(self._overlay, (0, 0))

    def draw_point(
        self,
        x: float,
        y: float,
        hue: float,
        saturation: float,
        brightness: float,
        alpha: float,
    ) -> None:
        if alpha <= 0.0:
            return
        # gfxdraw.pixel blends with the existing pixel using the colour's alpha.
        pygame.gfxdraw.pixel(self.screen, int(x), int(y), hsba_to_color(hue, saturation, brightness, alpha))

    # ------------------------------------------------------------------ Queries
    def canvas_size(self) -> Tuple[int, int]:
        return self.screen.get_size()

    def pointer_position(self) -> Optional[Tuple[int, int]]:
        return pygame.mouse.get_pos()

    # ------------------------------------------------------------------ Events
    def on_resize(self, callback: ResizeCallback) -> None:
        self._resize_callbacks.append(callback)

    def on_click(self, callback: ClickCallback) -> None:
        self._click_callbacks.append(callback)

    def poll_events(self) -> bool:
        """Dispatch pending window events.  Returns ``False`` once the user quits."""
        for event in pygame.event.get():
            if event.type == pygame.QUIT:
                return False
            if event.type == pygame.KEYDOWN and event.key == pygame.K_ESCAPE:
                return False
            if event.type == pygame.VIDEORESIZE:
                self._overlay = None
                logger.info("window resized to %dx%d", *event.size)
                for callback in self._resize_callbacks:
                    callback(tuple(event.size))
            elif event.type == pygame.MOUSEBUTTONUP and event.button == 1:
                for callback in self._click_callbacks:
                    callback(tuple(event.pos))
        return True

    def present(self) -> None:
        pygame.display.flip()

    def tick(self, fps: int) -> float:
        """Wait for the next frame slot; returns the elapsed milliseconds."""
        return self.clock.tick(fps)

    def close(self) -> None:
        pygame.quit()
