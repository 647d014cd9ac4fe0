"""Metal (fuzzy specular) material implementation.

Metals mirror the incoming direction about the surface normal and then perturb
the result by a random point in a sphere of radius ``fuzz``. A fuzz of 0 is a
perfect mirror. Perturbed directions that end up below the surface are
absorbed.

Example:
    >>> from pixelray.materials.metal import Metal
    >>> brushed_gold = Metal(albedo=(0.7, 0.6, 0.5), fuzz=0.3)
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from pixelray.core.ray import reflect, vec3
from pixelray.core.sampler import random_in_unit_sphere
from pixelray.materials.lambertian import Color, validate_albedo


@dataclass(frozen=True)
class Metal:
    """Reflective material with optional roughness.

    Attributes:
        albedo: The specular reflectance color (RGB, each component in [0, 1]).
        fuzz: Radius of the reflection perturbation, in [0, 1].
    """

    albedo: Color
    fuzz: float = 0.0

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", validate_albedo(self.albedo))
        if self.fuzz < 0.0 or self.fuzz > 1.0:
            raise ValueError(f"Fuzz {self.fuzz} is outside [0, 1]")
        object.__setattr__(self, "fuzz", float(self.fuzz))


@ti.func
def scatter_metal(
    albedo: vec3,
    fuzz: ti.f64,
    incident_direction: vec3,
    normal: vec3,
    state: ti.u32,
):
    """Scatter a ray off a metal surface.

    Args:
        albedo: The specular reflectance color (RGB).
        fuzz: Perturbation radius in [0, 1].
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal facing against the incoming ray.
        state: The random stream state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, next_state).
        did_scatter is 0 when the perturbed direction points into the surface.
    """
    reflected = reflect(tm.normalize(incident_direction), normal)
    jitter, next_state = random_in_unit_sphere(state)
    scattered_direction = reflected + fuzz * jitter

    did_scatter = 0
    if tm.dot(scattered_direction, normal) > 0.0:
        did_scatter = 1

    return scattered_direction, albedo, did_scatter, next_state
