"""Progressive Taichi path tracer for a static field of spheres.

This package renders the classic "random spheres" scene by repeatedly drawing
batches of random pixel samples, tracing each one through the scene, and
folding the result into a per-pixel running average.

Subpackages:
    core: Vector helpers, explicit random streams, the integrator, the
        accumulation buffer and the progressive driver
    geometry: Sphere primitive and ray intersection
    materials: Lambertian, metal and dielectric scattering
    scene: Scene container, nearest-hit search and the random sphere field
    camera: Thin lens camera with depth of field
    preview: PNG export, matplotlib preview and the GGUI window host

Taichi must be initialised with ``default_fp=ti.f64`` before any kernel runs;
see :func:`pixelray.runtime.initialize_taichi`.
"""

__version__ = "0.1.0"
