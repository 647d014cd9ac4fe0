"""The "random spheres" cover scene.

A huge gray ground sphere, a 22x22 grid of small jittered spheres with random
materials, and three large featured spheres (glass, diffuse brown, polished
metal), viewed through a thin lens camera focused 10 units away.

The layout is fully determined by the generator passed in, so two generators
seeded alike produce identical scenes.

Example:
    >>> import numpy as np
    >>> from pixelray.scene.random_spheres import create_random_spheres_scene
    >>> scene = create_random_spheres_scene(np.random.default_rng(7), 600 / 400)
"""

import logging
from dataclasses import dataclass

import numpy as np

from pixelray.camera.thin_lens import CameraParams, ThinLensCamera
from pixelray.materials import Dielectric, Lambertian, Metal
from pixelray.materials.material import Material
from pixelray.scene.manager import Scene, SceneObject

logger = logging.getLogger(__name__)

GRID_RANGE = range(-11, 11)
SMALL_RADIUS = 0.2
HERO_RADIUS = 1.0

# Small spheres are skipped when their center lands this close to the point
EXCLUSION_POINT = (4.0, 0.2, 0.0)
EXCLUSION_RADIUS = 0.9

GROUND_CENTER = (0.0, -1000.0, 0.0)
GROUND_RADIUS = 1000.0
GROUND_ALBEDO = (0.5, 0.5, 0.5)


@dataclass(frozen=True)
class RandomSpheresParams:
    """Tunable constants of the random spheres scene.

    Attributes:
        lookfrom: Camera position.
        lookat: Point the camera looks at.
        vup: Camera up vector.
        vfov: Vertical field of view in degrees.
        aperture: Lens diameter.
        focus_dist: Distance to the plane of perfect focus.
        diffuse_probability: Threshold below which a small sphere is diffuse.
        metal_probability: Threshold below which a small sphere is metal
            (glass otherwise).
    """

    lookfrom: tuple[float, float, float] = (13.0, 2.0, 3.0)
    lookat: tuple[float, float, float] = (0.0, 0.0, 0.0)
    vup: tuple[float, float, float] = (0.0, 1.0, 0.0)
    vfov: float = 20.0
    aperture: float = 0.1
    focus_dist: float = 10.0
    diffuse_probability: float = 0.8
    metal_probability: float = 0.95


def _random_material(rng: np.random.Generator, params: RandomSpheresParams) -> Material:
    """Draw the material of one small sphere."""
    choose = rng.random()
    if choose < params.diffuse_probability:
        albedo = rng.random(3) * rng.random(3) ** 2
        return Lambertian(tuple(albedo))
    if choose < params.metal_probability:
        albedo = rng.random(3) * 0.5 + 0.5
        fuzz = rng.uniform(0.0, 0.5)
        return Metal(tuple(albedo), fuzz)
    return Dielectric(1.5)


def create_random_spheres_objects(
    rng: np.random.Generator,
    params: RandomSpheresParams | None = None,
) -> list[SceneObject]:
    """Generate the objects of the random spheres scene.

    Args:
        rng: Generator that drives every random choice.
        params: Scene constants (defaults reproduce the cover image).

    Returns:
        The objects in scan order: ground first, heroes last.
    """
    if params is None:
        params = RandomSpheresParams()

    objects = [SceneObject(GROUND_CENTER, GROUND_RADIUS, Lambertian(GROUND_ALBEDO))]
    exclusion = np.array(EXCLUSION_POINT)

    for a in GRID_RANGE:
        for b in GRID_RANGE:
            center = np.array(
                [a + rng.uniform(0.0, 0.9), SMALL_RADIUS, b + rng.uniform(0.0, 0.9)]
            )
            if np.linalg.norm(center - exclusion) < EXCLUSION_RADIUS:
                continue
            material = _random_material(rng, params)
            objects.append(SceneObject(tuple(center), SMALL_RADIUS, material))

    objects.append(SceneObject((0.0, 1.0, 0.0), HERO_RADIUS, Dielectric(1.5)))
    objects.append(SceneObject((-4.0, 1.0, 0.0), HERO_RADIUS, Lambertian((0.4, 0.2, 0.1))))
    objects.append(SceneObject((4.0, 1.0, 0.0), HERO_RADIUS, Metal((0.7, 0.6, 0.5), 0.0)))
    return objects


def create_random_spheres_camera(
    aspect_ratio: float,
    params: RandomSpheresParams | None = None,
) -> ThinLensCamera:
    """Build the camera that frames the random spheres scene."""
    if params is None:
        params = RandomSpheresParams()
    return ThinLensCamera(
        CameraParams(
            lookfrom=params.lookfrom,
            lookat=params.lookat,
            vup=params.vup,
            vfov=params.vfov,
            aspect_ratio=aspect_ratio,
            aperture=params.aperture,
            focus_dist=params.focus_dist,
        )
    )


def create_random_spheres_scene(
    rng: np.random.Generator,
    aspect_ratio: float,
    params: RandomSpheresParams | None = None,
) -> Scene:
    """Create the random spheres scene.

    Args:
        rng: Generator that drives every random choice.
        aspect_ratio: Width over height of the image the camera renders.
        params: Scene constants (defaults reproduce the cover image).

    Returns:
        The uploaded Scene.
    """
    objects = create_random_spheres_objects(rng, params)
    camera = create_random_spheres_camera(aspect_ratio, params)
    logger.info("Generated random spheres scene with %d objects", len(objects))
    return Scene(objects, camera)
