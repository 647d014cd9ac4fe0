"""Scene container coordinating objects, materials and the camera.

A Scene owns an ordered tuple of :class:`SceneObject` values and a
:class:`ThinLensCamera`. At construction the objects are packed into
structure-of-arrays Taichi fields (sphere geometry plus the material tag and
parameters of each object). The scene is immutable afterwards, so kernels can
read it from any number of threads.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pixelray.camera.thin_lens import CameraParams, ThinLensCamera
    >>> from pixelray.materials import Lambertian
    >>> from pixelray.scene.manager import Scene, SceneObject
    >>> camera = ThinLensCamera(CameraParams(lookfrom=(0, 0, 0), lookat=(0, 0, -1)))
    >>> scene = Scene(
    ...     [SceneObject((0.0, 0.0, -1.0), 0.5, Lambertian((0.8, 0.3, 0.3)))],
    ...     camera,
    ... )
    >>> hit = scene.nearest_hit((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
"""

import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from typing import Optional

import numpy as np
import taichi as ti

from pixelray.camera.thin_lens import ThinLensCamera
from pixelray.core.ray import vec3
from pixelray.materials.material import Material, MaterialType, pack_material
from pixelray.scene.intersection import T_MAX, T_MIN, intersect_scene

logger = logging.getLogger(__name__)

Vec3Tuple = tuple[float, float, float]


@dataclass(frozen=True)
class SceneObject:
    """A sphere paired with its material.

    Attributes:
        center: Center of the sphere (x, y, z).
        radius: Radius of the sphere (positive).
        material: The surface material. Materials are immutable and may be
            shared between objects.
    """

    center: Vec3Tuple
    radius: float
    material: Material

    def __post_init__(self) -> None:
        if len(self.center) != 3:
            raise ValueError(f"Center must have 3 components, got {len(self.center)}")
        if not self.radius > 0.0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")
        object.__setattr__(self, "center", tuple(float(c) for c in self.center))
        object.__setattr__(self, "radius", float(self.radius))


@dataclass(frozen=True)
class Hit:
    """Host-side view of the nearest intersection.

    Attributes:
        t: Ray parameter of the hit.
        point: Intersection point.
        normal: Unit normal facing against the ray.
        front_face: Whether the ray struck the outside of the sphere.
        object_index: Index of the struck object in scene order.
    """

    t: float
    point: Vec3Tuple
    normal: Vec3Tuple
    front_face: bool
    object_index: int


@ti.data_oriented
class Scene:
    """An immutable sphere scene uploaded to Taichi fields.

    Attributes:
        objects: The objects in scan order.
        camera: The camera rays are generated from.
        num_objects: 0-d field holding the object count (read by kernels).
        centers: Sphere centers.
        radii: Sphere radii.
        material_kinds: MaterialType tag of each object.
        albedos: Packed albedo of each object.
        fuzzes: Packed fuzz of each object.
        iors: Packed refractive index of each object.
    """

    def __init__(self, objects: Iterable[SceneObject], camera: ThinLensCamera) -> None:
        self.objects: tuple[SceneObject, ...] = tuple(objects)
        self.camera = camera

        # Taichi fields need at least one element even for an empty scene
        capacity = max(len(self.objects), 1)

        self.num_objects = ti.field(dtype=ti.i32, shape=())
        self.centers = ti.Vector.field(3, dtype=ti.f64, shape=capacity)
        self.radii = ti.field(dtype=ti.f64, shape=capacity)
        self.material_kinds = ti.field(dtype=ti.i32, shape=capacity)
        self.albedos = ti.Vector.field(3, dtype=ti.f64, shape=capacity)
        self.fuzzes = ti.field(dtype=ti.f64, shape=capacity)
        self.iors = ti.field(dtype=ti.f64, shape=capacity)

        self._upload()
        logger.debug("Scene uploaded with %d objects", len(self.objects))

    def _upload(self) -> None:
        """Pack the objects into arrays and copy them to the fields."""
        capacity = self.radii.shape[0]
        centers = np.zeros((capacity, 3), dtype=np.float64)
        radii = np.ones(capacity, dtype=np.float64)
        kinds = np.zeros(capacity, dtype=np.int32)
        albedos = np.zeros((capacity, 3), dtype=np.float64)
        fuzzes = np.zeros(capacity, dtype=np.float64)
        iors = np.ones(capacity, dtype=np.float64)

        for i, obj in enumerate(self.objects):
            packed = pack_material(obj.material)
            centers[i] = obj.center
            radii[i] = obj.radius
            kinds[i] = int(packed.kind)
            albedos[i] = packed.albedo
            fuzzes[i] = packed.fuzz
            iors[i] = packed.ior

        self.num_objects[None] = len(self.objects)
        self.centers.from_numpy(centers)
        self.radii.from_numpy(radii)
        self.material_kinds.from_numpy(kinds)
        self.albedos.from_numpy(albedos)
        self.fuzzes.from_numpy(fuzzes)
        self.iors.from_numpy(iors)

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self) -> Iterator[SceneObject]:
        return iter(self.objects)

    def material_of(self, index: int) -> Material:
        """Return the material of the object at ``index``."""
        return self.objects[index].material

    def count_by_material(self) -> dict[MaterialType, int]:
        """Count objects per material type."""
        counts = {kind: 0 for kind in MaterialType}
        for obj in self.objects:
            counts[pack_material(obj.material).kind] += 1
        return counts

    @ti.kernel
    def _nearest_hit(self, origin: vec3, direction: vec3, out: ti.types.ndarray()) -> ti.i32:
        record = intersect_scene(self, origin, direction, T_MIN, T_MAX)
        out[0] = record.t
        for k in ti.static(range(3)):
            out[1 + k] = record.point[k]
            out[4 + k] = record.normal[k]
        out[7] = ti.cast(record.front_face, ti.f64)
        return record.object_index

    def nearest_hit(
        self, origin: Vec3Tuple, direction: Vec3Tuple
    ) -> Optional[tuple[Hit, Material]]:
        """Find the nearest object struck by a ray.

        Args:
            origin: Ray origin.
            direction: Ray direction (need not be normalized).

        Returns:
            A tuple of (hit, material), or None if the ray escapes.
        """
        out = np.zeros(8, dtype=np.float64)
        index = self._nearest_hit(
            vec3(origin[0], origin[1], origin[2]),
            vec3(direction[0], direction[1], direction[2]),
            out,
        )
        if index < 0:
            return None
        hit = Hit(
            t=float(out[0]),
            point=(float(out[1]), float(out[2]), float(out[3])),
            normal=(float(out[4]), float(out[5]), float(out[6])),
            front_face=bool(out[7] > 0.5),
            object_index=int(index),
        )
        return hit, self.objects[index].material

    def __repr__(self) -> str:
        return f"Scene(objects={len(self.objects)}, camera={self.camera!r})"
