#!/usr/bin/env python3
"""Render the random spheres scene to a PNG file.

Usage:
    python examples/render_random_spheres.py [options]

Options:
    --width WIDTH       Image width in pixels (default: 600)
    --height HEIGHT     Image height in pixels (default: 400)
    --ticks TICKS       Number of render ticks (default: 100)
    --samples SAMPLES   Samples per tick (default: 10000)
    --depth DEPTH       Maximum bounces per path (default: 50)
    --seed SEED         Seed for scene and samples (default: random)
    --output OUTPUT     Output file path (default: random_spheres.png)
    --cpu               Skip the CUDA backend
    --quiet             Suppress progress output

Example:
    python examples/render_random_spheres.py --width 300 --height 200 --ticks 20 --seed 7
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from pixelray.config import RenderConfig
from pixelray.logging_config import setup_logging
from pixelray.runtime import initialize_taichi

logger = logging.getLogger("pixelray.examples.render")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    defaults = RenderConfig.from_env()
    parser = argparse.ArgumentParser(
        description="Render the random spheres scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=defaults.width,
                        help=f"Image width in pixels (default: {defaults.width})")
    parser.add_argument("--height", type=int, default=defaults.height,
                        help=f"Image height in pixels (default: {defaults.height})")
    parser.add_argument("--ticks", type=int, default=100,
                        help="Number of render ticks (default: 100)")
    parser.add_argument("--samples", type=int, default=defaults.samples_per_tick,
                        help=f"Samples per tick (default: {defaults.samples_per_tick})")
    parser.add_argument("--depth", type=int, default=defaults.max_depth,
                        help=f"Maximum bounces per path (default: {defaults.max_depth})")
    parser.add_argument("--seed", type=int, default=defaults.seed,
                        help="Seed for scene and samples (default: random)")
    parser.add_argument("--output", type=str, default="random_spheres.png",
                        help="Output file path (default: random_spheres.png)")
    parser.add_argument("--cpu", action="store_true", help="Skip the CUDA backend")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def render_random_spheres(
    config: RenderConfig,
    num_ticks: int = 100,
    output_path: str = "random_spheres.png",
    quiet: bool = False,
) -> Path:
    """Render the random spheres scene and save to file.

    Args:
        config: Image size, depth, batch size and seed.
        num_ticks: Number of ticks to render.
        output_path: Output file path (PNG).
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy import so Taichi is initialised before any field is created
    from pixelray.core.progressive import ProgressiveRenderer

    logger.info("Creating random spheres scene (%dx%d)", config.width, config.height)
    renderer = ProgressiveRenderer.for_random_spheres(config)

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if quiet:
            return
        elapsed = time.time() - start_time
        rate = renderer.sample_count / elapsed if elapsed > 0 else 0.0
        print(
            f"\r  Progress: {current}/{target} ticks "
            f"({100.0 * current / target:.1f}%) - {rate:,.0f} samples/s",
            end="",
            flush=True,
        )

    renderer.render(num_ticks=num_ticks, callback=progress_callback)
    if not quiet:
        print()

    output_file = Path(output_path)
    renderer.save_image(str(output_file))

    logger.info(
        "Saved %s after %.2fs (%d samples)",
        output_file.absolute(),
        time.time() - start_time,
        renderer.sample_count,
    )
    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()
    setup_logging(level="WARNING" if args.quiet else "INFO")

    try:
        config = RenderConfig(
            width=args.width,
            height=args.height,
            max_depth=args.depth,
            samples_per_tick=args.samples,
            seed=args.seed,
        )
    except ValueError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 2

    backend = initialize_taichi(prefer_gpu=not args.cpu)
    logger.info("Taichi backend: %s", backend)

    render_random_spheres(
        config,
        num_ticks=args.ticks,
        output_path=args.output,
        quiet=args.quiet,
    )
    return 0


if __name__ == "__main__":
    sys.exit(main())
