"""Command line entry point: open a window and run the animation until closed."""

from __future__ import annotations

import argparse
import logging
import sys
from typing import List, Optional, Tuple

import numpy as np

from config import ConfigLoader
from noise_source import PerlinNoiseSource
from renderer import PygameRenderer
from simulation import Simulation

logger = logging.getLogger(__name__)


def _parse_size(text: str) -> Tuple[int, int]:
    try:
        width, height = (int(part) for part in text.lower().split('x'))
    except ValueError:
        raise argparse.ArgumentTypeError(f"expected WIDTHxHEIGHT, got {text!r}")
    if width <= 0 or height <= 0:
        raise argparse.ArgumentTypeError("window size must be positive")
    return width, height


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Animated flow-field particles.")
    parser.add_argument('--config', help="JSON file overriding simulation settings")
    parser.add_argument('--particles', type=int, help="number of particles")
    parser.add_argument('--seed', type=int, help="seed for noise and randomness")
    parser.add_argument('--fps', type=int, default=60, help="frame rate cap (default: 60)")
    parser.add_argument('--size', type=_parse_size, help="window size as WIDTHxHEIGHT (default: desktop size)")
    parser.add_argument('--log-level', default='INFO', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    return parser


def run(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(level=getattr(logging, args.log_level), format='[%(levelname)s] %(message)s')

    try:
        settings = ConfigLoader(args.config).settings(particle_count=args.particles)
    except (TypeError, ValueError) as exc:
        logger.error("invalid settings: %s", exc)
        return 2

    rng = np.random.default_rng(args.seed)
    noise = PerlinNoiseSource(seed=args.seed if args.seed is not None else int(rng.integers(0, 256)))
    renderer = PygameRenderer(size=args.size)
    try:
        simulation = Simulation(renderer, noise, settings, rng=rng)
        while renderer.poll_events():
            simulation.step()
            renderer.present()
            renderer.tick(args.fps)
        logger.info("stopped after %d frames", simulation.frame_no)
    finally:
        renderer.close()
    return 0


def main() -> None:
    sys.exit(run())


if __name__ == '__main__':
    main()
