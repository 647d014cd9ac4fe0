"""Explicit random number streams for kernels and the host.

pixelray never draws from ``ti.random``. The host owns a seeded
``numpy.random.Generator``; for every sample it draws a 32-bit seed which the
kernel expands into a private PCG-style stream. The stream state is a plain
``u32`` that is passed into and returned from every sampling helper, so the
same seed always reproduces the same path, regardless of how Taichi
schedules the parallel loop.

Kernel usage:
    >>> state = seed_stream(seed)
    >>> u, state = random_float(state)
    >>> direction, state = random_unit_vector(state)
"""

import logging
from typing import Optional

import numpy as np
import taichi as ti
import taichi.math as tm

from pixelray.core.ray import vec3

logger = logging.getLogger(__name__)

# LCG step and output permutation constants (all fit in a signed 32-bit int)
PCG_MULTIPLIER = 747796405
PCG_INCREMENT = 1013904223
PCG_OUTPUT_MULTIPLIER = 277803737

# 2^31, the output is reduced to 31 bits before conversion
_FLOAT_SCALE = 2147483648.0

# Attempts before rejection sampling gives up and returns the last candidate
MAX_REJECTION_ATTEMPTS = 100


def make_rng(seed: Optional[int] = None) -> np.random.Generator:
    """Create the host-side generator that drives a render.

    Args:
        seed: Seed for reproducible output. None draws fresh OS entropy.

    Returns:
        A new numpy Generator.
    """
    if seed is None:
        logger.debug("Seeding generator from OS entropy")
    return np.random.default_rng(seed)


@ti.func
def _advance(state: ti.u32) -> ti.u32:
    return state * ti.u32(PCG_MULTIPLIER) + ti.u32(PCG_INCREMENT)


@ti.func
def _permute(state: ti.u32) -> ti.u32:
    shift = (state >> ti.u32(28)) + ti.u32(4)
    word = ((state >> shift) ^ state) * ti.u32(PCG_OUTPUT_MULTIPLIER)
    return (word >> ti.u32(22)) ^ word


@ti.func
def seed_stream(seed: ti.u32) -> ti.u32:
    """Turn a raw 32-bit seed into a well mixed initial stream state."""
    return _permute(_advance(seed))


@ti.func
def random_float(state: ti.u32):
    """Draw a uniform float in [0, 1).

    Args:
        state: The current stream state.

    Returns:
        A tuple of (value, next_state).
    """
    next_state = _advance(state)
    word = _permute(next_state)
    value = ti.cast(word >> ti.u32(1), ti.f64) / _FLOAT_SCALE
    return value, next_state


@ti.func
def random_in_unit_sphere(state: ti.u32):
    """Rejection sample a point strictly inside the unit sphere.

    Returns:
        A tuple of (point, next_state).
    """
    p = vec3(0.0, 0.0, 0.0)
    s = state
    found = 0
    for _ in range(MAX_REJECTION_ATTEMPTS):
        if found == 0:
            x, s1 = random_float(s)
            y, s2 = random_float(s1)
            z, s3 = random_float(s2)
            s = s3
            p = vec3(2.0 * x - 1.0, 2.0 * y - 1.0, 2.0 * z - 1.0)
            len_sq = tm.dot(p, p)
            if len_sq < 1.0 and len_sq > 1e-12:
                found = 1
    return p, s


@ti.func
def random_unit_vector(state: ti.u32):
    """Sample a direction uniformly on the unit sphere.

    Uses the cylindrical projection (uniform z, uniform azimuth), which needs
    exactly two draws.

    Returns:
        A tuple of (unit_vector, next_state).
    """
    u, s1 = random_float(state)
    v, s2 = random_float(s1)
    z = 2.0 * u - 1.0
    phi = 2.0 * tm.pi * v
    r = tm.sqrt(tm.max(0.0, 1.0 - z * z))
    return vec3(r * tm.cos(phi), r * tm.sin(phi), z), s2


@ti.func
def random_in_unit_disk(state: ti.u32):
    """Sample a point uniformly inside the unit disk in the xy-plane.

    Polar sampling with ``r = sqrt(u)`` keeps the density uniform over area.

    Returns:
        A tuple of (point, next_state) with point.z == 0.
    """
    u, s1 = random_float(state)
    v, s2 = random_float(s1)
    r = tm.sqrt(u)
    theta = 2.0 * tm.pi * v
    return vec3(r * tm.cos(theta), r * tm.sin(theta), 0.0), s2
