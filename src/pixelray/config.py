"""Render configuration for the progressive driver.

Defaults mirror the interactive viewer: a 600x400 image refined by batches of
10 000 samples, each path capped at 50 bounces. Values can be overridden from
``PIXELRAY_*`` environment variables via :meth:`RenderConfig.from_env`.
"""

import os
from dataclasses import dataclass
from typing import Optional

DEFAULT_WIDTH = 600
DEFAULT_HEIGHT = 400
DEFAULT_MAX_DEPTH = 50
DEFAULT_SAMPLES_PER_TICK = 10_000


@dataclass(frozen=True)
class RenderConfig:
    """Host configuration for a progressive render.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Maximum number of bounces per path.
        samples_per_tick: Number of random samples traced per tick.
        seed: Seed for the driver's random generator. None seeds from
            OS entropy.
    """

    width: int = DEFAULT_WIDTH
    height: int = DEFAULT_HEIGHT
    max_depth: int = DEFAULT_MAX_DEPTH
    samples_per_tick: int = DEFAULT_SAMPLES_PER_TICK
    seed: Optional[int] = None

    def __post_init__(self) -> None:
        if self.width <= 0 or self.height <= 0:
            raise ValueError(
                f"Image dimensions must be positive, got {self.width}x{self.height}"
            )
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.samples_per_tick < 0:
            raise ValueError(
                f"samples_per_tick must be non-negative, got {self.samples_per_tick}"
            )

    @property
    def aspect_ratio(self) -> float:
        """Width divided by height."""
        return self.width / self.height

    @classmethod
    def from_env(cls) -> "RenderConfig":
        """Build a config from ``PIXELRAY_*`` environment variables.

        Recognised variables: PIXELRAY_WIDTH, PIXELRAY_HEIGHT,
        PIXELRAY_MAX_DEPTH, PIXELRAY_SAMPLES_PER_TICK and PIXELRAY_SEED.
        Unset variables fall back to the defaults.
        """
        seed = os.getenv("PIXELRAY_SEED")
        return cls(
            width=int(os.getenv("PIXELRAY_WIDTH", str(DEFAULT_WIDTH))),
            height=int(os.getenv("PIXELRAY_HEIGHT", str(DEFAULT_HEIGHT))),
            max_depth=int(os.getenv("PIXELRAY_MAX_DEPTH", str(DEFAULT_MAX_DEPTH))),
            samples_per_tick=int(
                os.getenv("PIXELRAY_SAMPLES_PER_TICK", str(DEFAULT_SAMPLES_PER_TICK))
            ),
            seed=int(seed) if seed else None,
        )
