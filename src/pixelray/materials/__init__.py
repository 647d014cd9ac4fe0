"""Material models for path tracing.

Components:
    lambertian: Ideal diffuse reflection
    metal: Specular reflection with fuzz
    dielectric: Reflection and refraction (glass)
    material: The closed Material variant, packing and kernel dispatch

Materials are immutable host values. Scenes pack them into Taichi fields at
construction; kernels dispatch on the MaterialType tag.
"""

from .dielectric import Dielectric, scatter_dielectric
from .lambertian import Lambertian, scatter_lambertian, validate_albedo
from .material import (
    Material,
    MaterialType,
    PackedMaterial,
    pack_material,
    scatter_material,
    unpack_material,
)
from .metal import Metal, scatter_metal

__all__ = [
    "Dielectric",
    "Lambertian",
    "Metal",
    "Material",
    "MaterialType",
    "PackedMaterial",
    "pack_material",
    "unpack_material",
    "scatter_material",
    "scatter_lambertian",
    "scatter_metal",
    "scatter_dielectric",
    "validate_albedo",
]
