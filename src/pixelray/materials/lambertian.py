"""Lambertian (ideal diffuse) material implementation.

The scattered direction is the surface normal plus a random unit vector,
which yields a cosine-weighted distribution over the hemisphere around the
normal. With that distribution the BRDF and PDF cancel, so the attenuation of
a bounce is just the albedo.

Example:
    >>> from pixelray.materials.lambertian import Lambertian
    >>> ground = Lambertian(albedo=(0.5, 0.5, 0.5))
    >>> # Inside a kernel:
    >>> # direction, attenuation, did_scatter, state = scatter_lambertian(
    >>> #     albedo, normal, state
    >>> # )
"""

from dataclasses import dataclass

import taichi as ti

from pixelray.core.ray import near_zero, vec3
from pixelray.core.sampler import random_unit_vector

Color = tuple[float, float, float]


def validate_albedo(albedo: Color) -> Color:
    """Check that an albedo has three components in [0, 1].

    Args:
        albedo: The reflectance color as (R, G, B).

    Returns:
        The albedo as a tuple of floats.

    Raises:
        ValueError: If the albedo does not have three components or any
            component is outside [0, 1].
    """
    components = tuple(float(c) for c in albedo)
    if len(components) != 3:
        raise ValueError(f"Albedo must have 3 components, got {len(components)}")
    for i, component in enumerate(components):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )
    return components  # type: ignore[return-value]


@dataclass(frozen=True)
class Lambertian:
    """Diffuse material.

    Attributes:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
    """

    albedo: Color

    def __post_init__(self) -> None:
        object.__setattr__(self, "albedo", validate_albedo(self.albedo))


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3, state: ti.u32):
    """Scatter a ray off a diffuse surface.

    A diffuse surface never absorbs. If the random unit vector happens to
    cancel the normal, the normal itself is used as the new direction.

    Args:
        albedo: The diffuse reflectance color (RGB).
        normal: The unit surface normal facing against the incoming ray.
        state: The random stream state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, next_state).
    """
    offset, next_state = random_unit_vector(state)
    candidate = normal + offset
    scattered_direction = candidate
    if near_zero(candidate):
        scattered_direction = normal
    return scattered_direction, albedo, 1, next_state
