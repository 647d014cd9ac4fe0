"""Scene-level nearest-hit search.

Objects are stored structure-of-arrays in Taichi fields owned by a
:class:`pixelray.scene.manager.Scene`. :func:`intersect_scene` scans them in
order, shrinking ``t_max`` to the closest hit found so far; a later object
must strictly improve on it, so the first object wins ties.

Example:
    >>> # Inside a kernel that received ``scene: ti.template()``:
    >>> # record = intersect_scene(scene, origin, direction, T_MIN, T_MAX)
    >>> # if record.hit == 1:
    >>> #     kind = scene.material_kinds[record.object_index]
"""

import taichi as ti
import taichi.math as tm

from pixelray.core.ray import vec3
from pixelray.geometry.sphere import Sphere, hit_sphere

# Self-intersection epsilon and the open upper bound of a fresh scan
T_MIN = 1e-3
T_MAX = tm.inf


@ti.dataclass
class SceneHitRecord:
    """Record of a ray-scene intersection.

    Attributes:
        hit: 1 if the ray intersected any object, 0 otherwise.
        t: The ray parameter of the nearest hit. Only valid if hit == 1.
        point: The intersection point. Only valid if hit == 1.
        normal: Unit surface normal facing against the ray.
            Only valid if hit == 1.
        front_face: 1 if the ray struck the outside of the surface.
            Only valid if hit == 1.
        object_index: Index of the struck object in scene order, -1 on a miss.
    """

    hit: ti.i32
    t: ti.f64
    point: vec3
    normal: vec3
    front_face: ti.i32
    object_index: ti.i32


@ti.func
def intersect_scene(
    scene: ti.template(),
    ray_origin: vec3,
    ray_direction: vec3,
    t_min: ti.f64,
    t_max: ti.f64,
) -> SceneHitRecord:
    """Find the closest intersection of a ray with every object in a scene.

    Args:
        scene: A Scene instance (passed as a template).
        ray_origin: The starting point of the ray.
        ray_direction: The direction of the ray.
        t_min: Exclusive lower bound on t.
        t_max: Exclusive upper bound on t.

    Returns:
        A SceneHitRecord for the nearest hit, or one with hit == 0.
    """
    closest_t = t_max
    did_hit = 0
    hit_t = 0.0
    hit_point = vec3(0.0, 0.0, 0.0)
    hit_normal = vec3(0.0, 0.0, 0.0)
    hit_front_face = 0
    hit_index = -1

    for i in range(scene.num_objects[None]):
        sphere = Sphere(center=scene.centers[i], radius=scene.radii[i])
        record = hit_sphere(ray_origin, ray_direction, sphere, t_min, closest_t)
        if record.hit == 1:
            closest_t = record.t
            did_hit = 1
            hit_t = record.t
            hit_point = record.point
            hit_normal = record.normal
            hit_front_face = record.front_face
            hit_index = i

    return SceneHitRecord(
        hit=did_hit,
        t=hit_t,
        point=hit_point,
        normal=hit_normal,
        front_face=hit_front_face,
        object_index=hit_index,
    )
