"""Geometric primitives and intersection routines."""

from .sphere import HitRecord, Sphere, hit_sphere

__all__ = ["Sphere", "HitRecord", "hit_sphere"]
