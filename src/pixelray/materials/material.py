"""Closed material variant and its dispatch.

On the host a material is one of three frozen dataclasses. Before upload it is
packed into a ``MaterialType`` tag plus a fixed set of parameters (albedo,
fuzz, refractive index) so that it fits in structure-of-arrays Taichi fields.
Inside kernels :func:`scatter_material` dispatches on the tag with an
exhaustive if/elif chain.
"""

from enum import IntEnum
from typing import NamedTuple, Union

import taichi as ti

from pixelray.core.ray import vec3
from pixelray.materials.dielectric import Dielectric, scatter_dielectric
from pixelray.materials.lambertian import Color, Lambertian, scatter_lambertian
from pixelray.materials.metal import Metal, scatter_metal

Material = Union[Lambertian, Metal, Dielectric]


class MaterialType(IntEnum):
    """Tag stored per object to select the scattering model."""

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


class PackedMaterial(NamedTuple):
    """Material flattened to the per-object field layout."""

    kind: MaterialType
    albedo: Color
    fuzz: float
    ior: float


def pack_material(material: Material) -> PackedMaterial:
    """Flatten a material into its tag and parameters.

    Unused parameters are filled with neutral values.

    Raises:
        TypeError: If ``material`` is not one of the supported variants.
    """
    match material:
        case Lambertian(albedo=albedo):
            return PackedMaterial(MaterialType.LAMBERTIAN, albedo, 0.0, 1.0)
        case Metal(albedo=albedo, fuzz=fuzz):
            return PackedMaterial(MaterialType.METAL, albedo, fuzz, 1.0)
        case Dielectric(refractive_index=ior):
            return PackedMaterial(MaterialType.DIELECTRIC, (1.0, 1.0, 1.0), 0.0, ior)
    raise TypeError(f"Unsupported material: {material!r}")


def unpack_material(kind: int, albedo: Color, fuzz: float, ior: float) -> Material:
    """Rebuild the host material from its packed form."""
    match MaterialType(kind):
        case MaterialType.LAMBERTIAN:
            return Lambertian(albedo)
        case MaterialType.METAL:
            return Metal(albedo, fuzz)
        case MaterialType.DIELECTRIC:
            return Dielectric(ior)
    raise ValueError(f"Unknown material type: {kind}")


@ti.func
def scatter_material(
    kind: ti.i32,
    albedo: vec3,
    fuzz: ti.f64,
    ior: ti.f64,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    state: ti.u32,
):
    """Dispatch to the scattering function selected by ``kind``.

    Args:
        kind: The MaterialType tag.
        albedo: Packed albedo (Lambertian and Metal).
        fuzz: Packed fuzz (Metal).
        ior: Packed refractive index (Dielectric).
        incident_direction: The incoming ray direction.
        normal: The unit surface normal facing against the incoming ray.
        front_face: 1 if the ray struck the outside of the surface.
        state: The random stream state.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter, next_state).
    """
    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0
    next_state = state

    if kind == int(MaterialType.LAMBERTIAN):
        d, a, s, st = scatter_lambertian(albedo, normal, state)
        scattered_direction = d
        attenuation = a
        did_scatter = s
        next_state = st
    elif kind == int(MaterialType.METAL):
        d, a, s, st = scatter_metal(albedo, fuzz, incident_direction, normal, state)
        scattered_direction = d
        attenuation = a
        did_scatter = s
        next_state = st
    elif kind == int(MaterialType.DIELECTRIC):
        d, a, s, st = scatter_dielectric(ior, incident_direction, normal, front_face, state)
        scattered_direction = d
        attenuation = a
        did_scatter = s
        next_state = st

    return scattered_direction, attenuation, did_scatter, next_state
