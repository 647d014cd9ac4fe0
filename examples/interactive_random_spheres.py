#!/usr/bin/env python3
"""Interactive progressive render of the random spheres scene.

Opens a 600x400 image in a window scaled up by 2 and refines it with a batch
of 10 000 random samples every frame until the window is closed.

Usage:
    python examples/interactive_random_spheres.py [--seed SEED] [--cpu]

Controls:
    - Escape: close the window
    - P: export the current estimate to a timestamped PNG
"""

from __future__ import annotations

import argparse
import logging
import sys

from pixelray.config import RenderConfig
from pixelray.logging_config import setup_logging
from pixelray.runtime import initialize_taichi

logger = logging.getLogger("pixelray.examples.interactive")

SCALE_FACTOR = 2


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(description="Interactive random spheres renderer.")
    parser.add_argument("--seed", type=int, default=None, help="Seed (default: random)")
    parser.add_argument("--cpu", action="store_true", help="Skip the CUDA backend")
    return parser.parse_args()


def main() -> int:
    """Main entry point for the interactive renderer.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    args = parse_args()
    setup_logging()

    # Initialize Taichi first (before importing modules that create fields)
    backend = initialize_taichi(prefer_gpu=not args.cpu)
    logger.info("Taichi backend: %s", backend)

    from pixelray.core.progressive import ProgressiveRenderer
    from pixelray.preview.interactive import InteractivePreview

    if not InteractivePreview.is_display_available():
        logger.error("No display available. Use examples/render_random_spheres.py instead.")
        return 1

    env_config = RenderConfig.from_env()
    config = RenderConfig(
        width=env_config.width,
        height=env_config.height,
        max_depth=env_config.max_depth,
        samples_per_tick=env_config.samples_per_tick,
        seed=args.seed if args.seed is not None else env_config.seed,
    )
    renderer = ProgressiveRenderer.for_random_spheres(config)
    InteractivePreview(renderer, scale_factor=SCALE_FACTOR).run()
    return 0


if __name__ == "__main__":
    sys.exit(main())
