"""Pytest configuration for pixelray tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts. Every kernel in the
    package works in double precision.
    """
    ti.init(arch=ti.cpu, default_fp=ti.f64, random_seed=42)
    yield


@pytest.fixture
def make_scene():
    """Factory for small scenes viewed by a pinhole camera.

    The camera sits at the origin looking down -z with a 90 degree field of
    view, so (s, t) = (0.5, 0.5) points straight at (0, 0, -1).
    """
    from pixelray.camera.thin_lens import CameraParams, ThinLensCamera
    from pixelray.scene.manager import Scene

    def _make(objects, aspect_ratio=1.0, aperture=0.0, focus_dist=1.0):
        camera = ThinLensCamera(
            CameraParams(
                lookfrom=(0.0, 0.0, 0.0),
                lookat=(0.0, 0.0, -1.0),
                vup=(0.0, 1.0, 0.0),
                vfov=90.0,
                aspect_ratio=aspect_ratio,
                aperture=aperture,
                focus_dist=focus_dist,
            )
        )
        return Scene(objects, camera)

    return _make
