"""Scene module for scene management and nearest-hit queries.

Components:
    manager: Scene container, SceneObject and the host-side Hit
    intersection: SceneHitRecord and the in-kernel nearest-hit scan
    random_spheres: The random spheres cover scene

Scene data is organized for efficient kernel access:
    - Structure-of-Arrays layout for sphere geometry
    - Per-object material tag and packed parameters
"""

from .intersection import T_MAX, T_MIN, SceneHitRecord, intersect_scene
from .manager import Hit, Scene, SceneObject
from .random_spheres import (
    RandomSpheresParams,
    create_random_spheres_camera,
    create_random_spheres_objects,
    create_random_spheres_scene,
)

__all__ = [
    "SceneHitRecord",
    "intersect_scene",
    "T_MIN",
    "T_MAX",
    "Scene",
    "SceneObject",
    "Hit",
    "RandomSpheresParams",
    "create_random_spheres_scene",
    "create_random_spheres_objects",
    "create_random_spheres_camera",
]
