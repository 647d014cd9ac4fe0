"""Path tracing integrator.

This module evaluates the color carried back along a camera ray and renders
batches of random pixel samples into an :class:`AccumulationBuffer`.

The recursive definition of a ray's color

    color(ray, 0)     = black
    color(ray, depth) = background(ray)                      if nothing is hit
                      = black                                if the hit absorbs
                      = attenuation * color(scattered, depth - 1)  otherwise

is evaluated as a loop with a running throughput, which multiplies the
attenuations in the same left-to-right order as the recursion.

Randomness is explicit: the host generator draws pixel coordinates, sub-pixel
jitter and one 32-bit stream seed per sample, and every kernel-side sampler
threads its stream state through the call chain. For a given generator state
the output is identical no matter how the parallel loop is scheduled.

Example:
    >>> import numpy as np
    >>> from pixelray.runtime import initialize_taichi
    >>> initialize_taichi(prefer_gpu=False)
    >>> from pixelray.core.accumulation import AccumulationBuffer
    >>> from pixelray.core.integrator import render_batch
    >>> from pixelray.scene.random_spheres import create_random_spheres_scene
    >>>
    >>> rng = np.random.default_rng(1)
    >>> scene = create_random_spheres_scene(rng, 600 / 400)
    >>> buffer = AccumulationBuffer(600, 400)
    >>> render_batch(scene, buffer, rng, sample_count=10_000)
"""

import logging

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pixelray.core.accumulation import AccumulationBuffer
from pixelray.core.ray import background_color, near_zero, vec3
from pixelray.core.sampler import seed_stream
from pixelray.materials.material import scatter_material
from pixelray.scene.intersection import T_MAX, T_MIN, intersect_scene

logger = logging.getLogger(__name__)

# =============================================================================
# Rendering Constants
# =============================================================================

# Maximum ray bounces (path length)
MAX_DEPTH = 50

# Samples traced per render tick
DEFAULT_SAMPLES_PER_TICK = 10_000

Vec3Tuple = tuple[float, float, float]


# =============================================================================
# Path Tracing Core
# =============================================================================


@ti.func
def trace_path(
    scene: ti.template(),
    origin: vec3,
    direction: vec3,
    max_depth: ti.i32,
    state: ti.u32,
):
    """Evaluate the color carried back along one ray.

    Args:
        scene: The Scene to trace against (template).
        origin: Ray origin.
        direction: Ray direction (need not be normalized).
        max_depth: Maximum number of surface interactions.
        state: The random stream state.

    Returns:
        A tuple of (color, next_state). Non-finite channels are zeroed.
    """
    color = vec3(0.0, 0.0, 0.0)
    throughput = vec3(1.0, 1.0, 1.0)
    ray_origin = origin
    ray_direction = direction
    s = state

    # Active flag for path continuation (no break inside ti.func loops)
    active = 1

    for _ in range(max_depth):
        if active == 1:
            if near_zero(ray_direction):
                # A zero-length ray carries no light
                active = 0

        if active == 1:
            record = intersect_scene(scene, ray_origin, ray_direction, T_MIN, T_MAX)

            if record.hit == 0:
                color = throughput * background_color(ray_direction)
                active = 0
            else:
                i = record.object_index
                scattered, attenuation, did_scatter, s1 = scatter_material(
                    scene.material_kinds[i],
                    scene.albedos[i],
                    scene.fuzzes[i],
                    scene.iors[i],
                    ray_direction,
                    record.normal,
                    record.front_face,
                    s,
                )
                s = s1

                if did_scatter == 0 or near_zero(scattered):
                    # Absorbed
                    active = 0
                else:
                    throughput = throughput * attenuation
                    ray_origin = record.point
                    ray_direction = scattered

    # Out of bounces leaves the color black
    for c in ti.static(range(3)):
        if tm.isnan(color[c]) or tm.isinf(color[c]):
            color[c] = 0.0

    return color, s


# =============================================================================
# Rendering Kernels
# =============================================================================


@ti.kernel
def _trace_samples(
    scene: ti.template(),
    xs: ti.types.ndarray(),
    ys: ti.types.ndarray(),
    jitter: ti.types.ndarray(),
    seeds: ti.types.ndarray(),
    width: ti.i32,
    height: ti.i32,
    max_depth: ti.i32,
    colors: ti.types.ndarray(),
):
    """Trace one camera sample per entry and store its color.

    Args:
        scene: The Scene to render (template).
        xs: Pixel column of each sample, shape (n,).
        ys: Pixel row of each sample (0 = bottom), shape (n,).
        jitter: Sub-pixel offsets in [0, 1), shape (n, 2).
        seeds: 32-bit stream seed of each sample, shape (n,).
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Maximum bounces per path.
        colors: Output colors, shape (n, 3).
    """
    for i in range(xs.shape[0]):
        state = seed_stream(ti.cast(seeds[i], ti.u32))
        s = (ti.cast(xs[i], ti.f64) + jitter[i, 0]) / ti.cast(width, ti.f64)
        t = (ti.cast(ys[i], ti.f64) + jitter[i, 1]) / ti.cast(height, ti.f64)
        ray, s1 = scene.camera.get_ray(s, t, state)
        color, _ = trace_path(scene, ray.origin, ray.direction, max_depth, s1)
        for c in ti.static(range(3)):
            colors[i, c] = color[c]


@ti.kernel
def _ray_color(
    scene: ti.template(),
    origin: vec3,
    direction: vec3,
    max_depth: ti.i32,
    seed: ti.u32,
) -> vec3:
    color, _ = trace_path(scene, origin, direction, max_depth, seed_stream(seed))
    return color


# =============================================================================
# Public Rendering API
# =============================================================================


def ray_color(
    scene,
    origin: Vec3Tuple,
    direction: Vec3Tuple,
    depth: int = MAX_DEPTH,
    seed: int = 0,
) -> Vec3Tuple:
    """Evaluate the color of a single ray from Python.

    Args:
        scene: The Scene to trace against.
        origin: Ray origin.
        direction: Ray direction (need not be normalized).
        depth: Maximum number of bounces. 0 always yields black.
        seed: 32-bit seed of the ray's random stream.

    Returns:
        Tuple of (R, G, B) color values.

    Raises:
        ValueError: If depth is negative.
    """
    if depth < 0:
        raise ValueError(f"depth must be non-negative, got {depth}")
    color = _ray_color(
        scene,
        vec3(origin[0], origin[1], origin[2]),
        vec3(direction[0], direction[1], direction[2]),
        depth,
        seed & 0xFFFFFFFF,
    )
    return (float(color[0]), float(color[1]), float(color[2]))


def trace_samples(
    scene,
    xs: npt.NDArray[np.int32],
    ys: npt.NDArray[np.int32],
    jitter: npt.NDArray[np.float64],
    seeds: npt.NDArray[np.uint32],
    width: int,
    height: int,
    max_depth: int = MAX_DEPTH,
) -> npt.NDArray[np.float64]:
    """Trace a prepared batch of samples without touching any buffer.

    Args:
        scene: The Scene to render.
        xs: Pixel columns, shape (n,).
        ys: Pixel rows (0 = bottom), shape (n,).
        jitter: Sub-pixel offsets in [0, 1), shape (n, 2).
        seeds: Stream seeds, shape (n,).
        width: Image width in pixels.
        height: Image height in pixels.
        max_depth: Maximum bounces per path.

    Returns:
        Colors of shape (n, 3).
    """
    n = len(xs)
    colors = np.zeros((n, 3), dtype=np.float64)
    if n == 0:
        return colors
    _trace_samples(
        scene,
        np.ascontiguousarray(xs, dtype=np.int32),
        np.ascontiguousarray(ys, dtype=np.int32),
        np.ascontiguousarray(jitter, dtype=np.float64),
        np.ascontiguousarray(seeds, dtype=np.uint32),
        width,
        height,
        max_depth,
        colors,
    )
    return colors


def _draw_seeds(rng: np.random.Generator, n: int) -> npt.NDArray[np.uint32]:
    return rng.integers(0, 2**32, size=n, dtype=np.uint32)


def render_batch(
    scene,
    buffer: AccumulationBuffer,
    rng: np.random.Generator,
    sample_count: int = DEFAULT_SAMPLES_PER_TICK,
    max_depth: int = MAX_DEPTH,
) -> None:
    """Trace ``sample_count`` random pixel samples into the buffer.

    Pixels are chosen uniformly with replacement, so a single batch may hit
    the same pixel several times and miss others entirely.

    Args:
        scene: The Scene to render.
        buffer: Destination accumulation buffer.
        rng: The driver's generator; advanced by this call.
        sample_count: Number of samples to trace.
        max_depth: Maximum bounces per path.

    Raises:
        ValueError: If sample_count or max_depth is negative.
    """
    if sample_count < 0:
        raise ValueError(f"sample_count must be non-negative, got {sample_count}")
    if max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}")
    if sample_count == 0:
        return

    xs = rng.integers(0, buffer.width, size=sample_count, dtype=np.int32)
    ys = rng.integers(0, buffer.height, size=sample_count, dtype=np.int32)
    jitter = rng.random((sample_count, 2))
    seeds = _draw_seeds(rng, sample_count)

    colors = trace_samples(
        scene, xs, ys, jitter, seeds, buffer.width, buffer.height, max_depth
    )
    buffer.add_samples(xs, ys, colors)
    logger.debug("Rendered batch of %d samples", sample_count)


def render_pass(
    scene,
    buffer: AccumulationBuffer,
    rng: np.random.Generator,
    max_depth: int = MAX_DEPTH,
) -> None:
    """Trace exactly one jittered sample through every pixel.

    Args:
        scene: The Scene to render.
        buffer: Destination accumulation buffer.
        rng: The driver's generator; advanced by this call.
        max_depth: Maximum bounces per path.

    Raises:
        ValueError: If max_depth is negative.
    """
    if max_depth < 0:
        raise ValueError(f"max_depth must be non-negative, got {max_depth}")

    ys, xs = np.indices((buffer.height, buffer.width), dtype=np.int32)
    xs = xs.reshape(-1)
    ys = ys.reshape(-1)
    n = xs.shape[0]
    jitter = rng.random((n, 2))
    seeds = _draw_seeds(rng, n)

    colors = trace_samples(
        scene, xs, ys, jitter, seeds, buffer.width, buffer.height, max_depth
    )
    buffer.add_samples(xs, ys, colors)
    logger.debug("Rendered full pass of %d pixels", n)
