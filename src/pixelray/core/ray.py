"""Ray data structure, vector utilities and the sky background.

This module provides the Ray dataclass and the double precision vector helpers
used by every other kernel. All ``@ti.func`` helpers are meant to be called
from inside Taichi kernels.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pixelray.core.ray import Ray, ray_at, vec3
    >>> # Inside a kernel:
    >>> # ray = Ray(origin=vec3(0.0, 0.0, 0.0), direction=vec3(0.0, 0.0, -1.0))
    >>> # point = ray_at(ray, 5.0)
"""

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

# Double precision 3-vector used for points, directions and colors
vec3 = ti.types.vector(3, ti.f64)

# Sky gradient endpoints (white at the horizon, blue overhead)
SKY_WHITE = (1.0, 1.0, 1.0)
SKY_BLUE = (0.5, 0.7, 1.0)


@ti.dataclass
class Ray:
    """A ray with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Need not be
            unit length.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f64) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction inside a kernel."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a normal.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (unit length).

    Returns:
        The mirrored direction ``incident - 2 (incident . n) n``.
    """
    return incident - 2.0 * tm.dot(incident, normal) * normal


@ti.func
def refract(incident: vec3, normal: vec3, eta: ti.f64) -> vec3:
    """Refract a unit incident vector through a surface using Snell's law.

    The incident vector must be unit length and the normal must face against
    it. Callers check for total internal reflection beforehand.

    Args:
        incident: The incoming unit direction.
        normal: The unit surface normal, facing against ``incident``.
        eta: Ratio of refractive indices (n_incident / n_transmitted).

    Returns:
        The refracted direction (unit length).
    """
    cos_theta = tm.min(-tm.dot(incident, normal), 1.0)
    r_out_perp = eta * (incident + cos_theta * normal)
    r_out_parallel = -tm.sqrt(ti.abs(1.0 - tm.dot(r_out_perp, r_out_perp))) * normal
    return r_out_perp + r_out_parallel


@ti.func
def schlick_reflectance(cosine: ti.f64, ref_idx: ti.f64) -> ti.f64:
    """Fresnel reflectance using Schlick's approximation.

    Args:
        cosine: Cosine of the angle between incident direction and normal.
        ref_idx: Ratio of refractive indices.

    Returns:
        The approximate probability that the surface reflects.
    """
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0_sq = r0 * r0
    return r0_sq + (1.0 - r0_sq) * ((1.0 - cosine) ** 5)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Return 1 if every component of v is within 1e-8 of zero."""
    s = 1e-8
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


# =============================================================================
# Sky Background
# =============================================================================


@ti.func
def background_color(direction: vec3) -> vec3:
    """Color seen by a ray that leaves the scene.

    A vertical gradient from white (looking down) to sky blue (looking up)
    driven by the y component of the normalized direction.

    Args:
        direction: The ray direction (any non-zero length).

    Returns:
        The background color for this direction.
    """
    unit = tm.normalize(direction)
    t = 0.5 * (unit.y + 1.0)
    white = vec3(SKY_WHITE[0], SKY_WHITE[1], SKY_WHITE[2])
    blue = vec3(SKY_BLUE[0], SKY_BLUE[1], SKY_BLUE[2])
    return (1.0 - t) * white + t * blue


def background_color_numpy(directions: npt.ArrayLike) -> npt.NDArray[np.float64]:
    """Evaluate the sky gradient on the host.

    Args:
        directions: Array of shape (..., 3) with ray directions.

    Returns:
        Array of shape (..., 3) with background colors.
    """
    d = np.asarray(directions, dtype=np.float64)
    unit = d / np.linalg.norm(d, axis=-1, keepdims=True)
    t = 0.5 * (unit[..., 1:2] + 1.0)
    return (1.0 - t) * np.asarray(SKY_WHITE) + t * np.asarray(SKY_BLUE)
