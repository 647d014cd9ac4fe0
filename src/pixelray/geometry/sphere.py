"""Sphere primitive with robust ray-sphere intersection.

This module provides the Sphere dataclass and the intersection routine used by
the scene scan. Roots of the ray-sphere quadratic are computed with the
numerically stable formula from Ray Tracing Gems, falling back to the textbook
formula for near-tangent rays.

The returned normal always faces against the incoming ray; ``front_face``
records which side was struck so that transmission code knows whether it is
entering or leaving the sphere.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pixelray.geometry.sphere import Sphere, hit_sphere, vec3
    >>> # Inside a kernel:
    >>> # sphere = Sphere(center=vec3(0.0, 0.0, -1.0), radius=0.5)
    >>> # record = hit_sphere(origin, direction, sphere, 1e-3, tm.inf)
"""

import taichi as ti
import taichi.math as tm

from pixelray.core.ray import vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point and radius.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive).
    """

    center: vec3
    radius: ti.f64


@ti.dataclass
class HitRecord:
    """Record of a ray-sphere intersection.

    Attributes:
        hit: 1 if the ray intersected the sphere, 0 otherwise.
        t: The ray parameter of the intersection. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: Unit surface normal facing against the ray.
            Only valid if hit == 1.
        front_face: 1 if the ray struck the outside of the sphere, 0 if it
            struck the inside. Only valid if hit == 1.
    """

    hit: ti.i32
    t: ti.f64
    point: vec3
    normal: vec3
    front_face: ti.i32


@ti.func
def _sphere_roots(a: ti.f64, half_b: ti.f64, c: ti.f64, root_d: ti.f64):
    """Both roots of a*t^2 + 2*half_b*t + c = 0, smaller first.

    The larger-magnitude root comes from ``q = -(half_b + sign * root_d)`` and
    the other from Vieta's product ``c / q``, so neither subtracts two nearly
    equal numbers.
    """
    near = 0.0
    far = 0.0
    q = -half_b - ti.select(half_b < 0.0, -root_d, root_d)

    if ti.abs(q) < 1e-12:
        # half_b and root_d both vanish
        near = -root_d / a
        far = root_d / a
    else:
        near = tm.min(q / a, c / q)
        far = tm.max(q / a, c / q)

    return near, far


@ti.func
def _in_open_interval(t: ti.f64, t_min: ti.f64, t_max: ti.f64) -> ti.i32:
    inside = 0
    if t_min < t and t < t_max:
        inside = 1
    return inside


@ti.func
def hit_sphere(
    ray_origin: vec3,
    ray_direction: vec3,
    sphere: Sphere,
    t_min: ti.f64,
    t_max: ti.f64,
) -> HitRecord:
    """Intersect a ray with a sphere.

    Substituting the ray into ``|p - center|^2 = radius^2`` gives

        a*t^2 + 2*half_b*t + c = 0

    with ``a = d.d``, ``half_b = d.oc``, ``c = oc.oc - r^2`` and
    ``oc = origin - center``. The roots are tested in ascending order and the
    first one inside the open interval (t_min, t_max) is accepted.

    Args:
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray (need not be normalized).
        sphere: The sphere to test.
        t_min: Exclusive lower bound on t (self-intersection epsilon).
        t_max: Exclusive upper bound on t (closest hit so far).

    Returns:
        A HitRecord. Check ``hit`` to see whether an intersection occurred.
    """
    zero = vec3(0.0, 0.0, 0.0)
    record = HitRecord(hit=0, t=0.0, point=zero, normal=zero, front_face=0)

    oc = ray_origin - sphere.center
    a = tm.dot(ray_direction, ray_direction)
    half_b = tm.dot(ray_direction, oc)
    c = tm.dot(oc, oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    if discriminant >= 0.0:
        near, far = _sphere_roots(a, half_b, c, tm.sqrt(discriminant))

        root = far
        accepted = _in_open_interval(far, t_min, t_max)
        if _in_open_interval(near, t_min, t_max):
            root = near
            accepted = 1

        if accepted:
            point = ray_origin + root * ray_direction
            outward = (point - sphere.center) / sphere.radius
            record.hit = 1
            record.t = root
            record.point = point
            if tm.dot(ray_direction, outward) < 0.0:
                record.normal = outward
                record.front_face = 1
            else:
                record.normal = -outward

    return record
