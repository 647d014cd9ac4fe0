"""Dielectric (glass/water) material implementation.

Dielectrics either reflect or refract every ray that reaches them; they never
absorb and their attenuation is white.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when (n1 / n2) * sin(theta1) > 1

The choice between reflection and refraction is made stochastically with the
Schlick reflectance as the probability of reflecting.

Example:
    >>> from pixelray.materials.dielectric import Dielectric
    >>> glass = Dielectric(refractive_index=1.5)
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from pixelray.core.ray import reflect, refract, schlick_reflectance, vec3
from pixelray.core.sampler import random_float


@dataclass(frozen=True)
class Dielectric:
    """Transparent material.

    Attributes:
        refractive_index: Index of refraction. Common values:
            - Air: 1.0
            - Water: 1.33
            - Glass: 1.5
            - Diamond: 2.4
    """

    refractive_index: float

    def __post_init__(self) -> None:
        if not self.refractive_index > 0.0:
            raise ValueError(
                f"Index of refraction must be positive, got {self.refractive_index}"
            )
        object.__setattr__(self, "refractive_index", float(self.refractive_index))


@ti.func
def scatter_dielectric(
    ior: ti.f64,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.u32,
):
    """Scatter a ray through a dielectric surface.

    Args:
        ior: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal facing against the incoming ray.
        front_face: 1 if the ray is entering the material, 0 if leaving it.
        state: The random stream state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, next_state).
        did_scatter is always 1.
    """
    attenuation = vec3(1.0, 1.0, 1.0)

    # Entering: air to material. Leaving: material to air.
    refraction_ratio = ior
    if front_face == 1:
        refraction_ratio = 1.0 / ior

    unit_direction = tm.normalize(incident_direction)
    cos_theta = tm.min(-tm.dot(unit_direction, normal), 1.0)
    sin_theta = tm.sqrt(tm.max(0.0, 1.0 - cos_theta * cos_theta))

    cannot_refract = refraction_ratio * sin_theta > 1.0
    reflectance = schlick_reflectance(cos_theta, refraction_ratio)
    u, next_state = random_float(state)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    if cannot_refract or u < reflectance:
        scattered_direction = reflect(unit_direction, normal)
    else:
        scattered_direction = refract(unit_direction, normal, refraction_ratio)

    return scattered_direction, attenuation, 1, next_state
