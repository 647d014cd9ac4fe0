"""Thin lens camera model with depth of field.

The camera builds an orthonormal basis (u, v, w) from the view parameters:
- w: points from lookat toward lookfrom (opposite view direction)
- u: points right in the image plane
- v: points up in the image plane

The image plane sits at ``focus_dist`` in front of the lens. Each ray starts
at a random point on a lens disk of radius ``aperture / 2`` and passes through
the image-plane point for (s, t), so geometry on the focus plane stays sharp
while everything else blurs in proportion to the aperture.

The basis is computed once on the host with NumPy and uploaded to 0-d Taichi
fields owned by the camera instance.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from pixelray.camera.thin_lens import CameraParams, ThinLensCamera
    >>> camera = ThinLensCamera(CameraParams(
    ...     lookfrom=(13.0, 2.0, 3.0),
    ...     lookat=(0.0, 0.0, 0.0),
    ...     vup=(0.0, 1.0, 0.0),
    ...     vfov=20.0,
    ...     aspect_ratio=1.5,
    ...     aperture=0.1,
    ...     focus_dist=10.0,
    ... ))
    >>> origin, direction = camera.sample_ray(0.5, 0.5, seed=7)
"""

import math
from dataclasses import dataclass

import numpy as np
import taichi as ti

from pixelray.core.ray import make_ray
from pixelray.core.sampler import random_in_unit_disk, seed_stream

Vec3Tuple = tuple[float, float, float]


@dataclass(frozen=True)
class CameraParams:
    """Configuration for a thin lens camera.

    Attributes:
        lookfrom: Camera position in world space (x, y, z).
        lookat: Point the camera is looking at in world space (x, y, z).
        vup: Up direction vector for camera orientation (typically (0, 1, 0)).
        vfov: Vertical field of view in degrees, in (0, 180).
        aspect_ratio: Width divided by height of the output image.
        aperture: Lens diameter. 0 gives a pinhole camera.
        focus_dist: Distance from the lens to the plane in perfect focus.
    """

    lookfrom: Vec3Tuple
    lookat: Vec3Tuple
    vup: Vec3Tuple = (0.0, 1.0, 0.0)
    vfov: float = 20.0
    aspect_ratio: float = 1.5
    aperture: float = 0.0
    focus_dist: float = 1.0

    def __post_init__(self) -> None:
        if not 0.0 < self.vfov < 180.0:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {self.vfov}")
        if self.aspect_ratio <= 0.0:
            raise ValueError(f"aspect_ratio must be positive, got {self.aspect_ratio}")
        if self.aperture < 0.0:
            raise ValueError(f"aperture must be non-negative, got {self.aperture}")
        if self.focus_dist <= 0.0:
            raise ValueError(f"focus_dist must be positive, got {self.focus_dist}")
        if np.allclose(self.lookfrom, self.lookat):
            raise ValueError("lookfrom and lookat must be distinct points")


@ti.data_oriented
class ThinLensCamera:
    """Camera state uploaded to Taichi fields.

    Attributes:
        params: The configuration the camera was built from.
        lens_radius: Half the aperture.
    """

    def __init__(self, params: CameraParams) -> None:
        self.params = params
        self.lens_radius = params.aperture / 2.0

        self._origin = ti.Vector.field(3, dtype=ti.f64, shape=())
        self._u = ti.Vector.field(3, dtype=ti.f64, shape=())
        self._v = ti.Vector.field(3, dtype=ti.f64, shape=())
        self._w = ti.Vector.field(3, dtype=ti.f64, shape=())
        self._horizontal = ti.Vector.field(3, dtype=ti.f64, shape=())
        self._vertical = ti.Vector.field(3, dtype=ti.f64, shape=())
        self._lower_left = ti.Vector.field(3, dtype=ti.f64, shape=())
        self._lens_radius = ti.field(dtype=ti.f64, shape=())

        self._setup()

    def _setup(self) -> None:
        """Compute the basis and viewport on the host and upload them."""
        params = self.params

        theta = math.radians(params.vfov)
        h = math.tan(theta / 2.0)
        viewport_height = 2.0 * h
        viewport_width = params.aspect_ratio * viewport_height

        lookfrom = np.array(params.lookfrom, dtype=np.float64)
        lookat = np.array(params.lookat, dtype=np.float64)
        vup = np.array(params.vup, dtype=np.float64)

        w = lookfrom - lookat
        w = w / np.linalg.norm(w)

        u = np.cross(vup, w)
        u_norm = np.linalg.norm(u)
        if u_norm < 1e-12:
            raise ValueError("vup must not be parallel to the view direction")
        u = u / u_norm

        v = np.cross(w, u)

        horizontal = params.focus_dist * viewport_width * u
        vertical = params.focus_dist * viewport_height * v
        lower_left = lookfrom - horizontal / 2.0 - vertical / 2.0 - params.focus_dist * w

        self._origin[None] = lookfrom.tolist()
        self._u[None] = u.tolist()
        self._v[None] = v.tolist()
        self._w[None] = w.tolist()
        self._horizontal[None] = horizontal.tolist()
        self._vertical[None] = vertical.tolist()
        self._lower_left[None] = lower_left.tolist()
        self._lens_radius[None] = self.lens_radius

    @ti.func
    def get_ray(self, s: ti.f64, t: ti.f64, state: ti.u32):
        """Generate a ray through normalized image coordinates (s, t).

        - s = 0: left edge, s = 1: right edge
        - t = 0: bottom edge, t = 1: top edge

        Args:
            s: Horizontal coordinate in [0, 1].
            t: Vertical coordinate in [0, 1].
            state: The random stream state used for the lens sample.

        Returns:
            A tuple of (ray, next_state). The ray direction is not normalized.
        """
        disk, next_state = random_in_unit_disk(state)
        rd = self._lens_radius[None] * disk
        offset = self._u[None] * rd.x + self._v[None] * rd.y

        origin = self._origin[None] + offset
        direction = (
            self._lower_left[None]
            + s * self._horizontal[None]
            + t * self._vertical[None]
            - origin
        )
        return make_ray(origin, direction), next_state

    @ti.kernel
    def _sample_ray(self, s: ti.f64, t: ti.f64, seed: ti.u32, out: ti.types.ndarray()):
        ray, _ = self.get_ray(s, t, seed_stream(seed))
        for k in ti.static(range(3)):
            out[0, k] = ray.origin[k]
            out[1, k] = ray.direction[k]

    def sample_ray(self, s: float, t: float, seed: int = 0) -> tuple[Vec3Tuple, Vec3Tuple]:
        """Generate one camera ray from Python.

        Args:
            s: Horizontal image coordinate in [0, 1].
            t: Vertical image coordinate in [0, 1].
            seed: 32-bit seed for the lens sample.

        Returns:
            A tuple of (origin, direction).
        """
        out = np.zeros((2, 3), dtype=np.float64)
        self._sample_ray(s, t, seed & 0xFFFFFFFF, out)
        origin = (float(out[0, 0]), float(out[0, 1]), float(out[0, 2]))
        direction = (float(out[1, 0]), float(out[1, 1]), float(out[1, 2]))
        return origin, direction

    def get_camera_info(self) -> dict[str, Vec3Tuple]:
        """Get current camera state for debugging.

        Returns:
            Dictionary with origin, u, v, w, horizontal, vertical, lower_left.
        """
        fields = {
            "origin": self._origin,
            "u": self._u,
            "v": self._v,
            "w": self._w,
            "horizontal": self._horizontal,
            "vertical": self._vertical,
            "lower_left": self._lower_left,
        }
        info = {}
        for name, field in fields.items():
            value = field[None]
            info[name] = (float(value[0]), float(value[1]), float(value[2]))
        return info

    def __repr__(self) -> str:
        return f"ThinLensCamera({self.params!r})"
