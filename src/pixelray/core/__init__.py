"""Core rendering module.

Components:
    ray: Ray data structure, vector utilities and the sky background
    sampler: Explicit random streams for kernels and the host generator
    integrator: Path evaluation and batch rendering kernels
    accumulation: Per-pixel running averages and RGBA display conversion
    progressive: The tick-driven progressive renderer

All compute-intensive operations use Taichi kernels in double precision.
"""

from .accumulation import (
    AccumulationBuffer,
    display_array,
    to_display_bytes,
    write_display_bytes,
)
from .ray import (
    Ray,
    background_color,
    background_color_numpy,
    make_ray,
    near_zero,
    ray_at,
    reflect,
    refract,
    schlick_reflectance,
    vec3,
)
from .sampler import (
    make_rng,
    random_float,
    random_in_unit_disk,
    random_in_unit_sphere,
    random_unit_vector,
    seed_stream,
)

# Note: integrator and progressive are NOT imported here to avoid circular imports.
# Import directly from pixelray.core.integrator or pixelray.core.progressive.

__all__ = [
    "AccumulationBuffer",
    "display_array",
    "to_display_bytes",
    "write_display_bytes",
    "Ray",
    "ray_at",
    "make_ray",
    "vec3",
    "reflect",
    "refract",
    "schlick_reflectance",
    "near_zero",
    "background_color",
    "background_color_numpy",
    "make_rng",
    "seed_stream",
    "random_float",
    "random_in_unit_sphere",
    "random_unit_vector",
    "random_in_unit_disk",
]
