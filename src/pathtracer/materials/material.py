"""Material arena and scatter dispatch.

Materials form a closed set of variants (Lambertian, Metal, Dielectric).
They are stored in a single arena of Taichi fields indexed by a small integer
material id; primitives refer to materials by that id, so any number of
primitives can share one material.

Each arena slot holds a variant tag plus the union of all variant
parameters; scatter() switches on the tag.
"""

from enum import IntEnum

import numpy as np
import taichi as ti

from src.pathtracer.core.ray import vec3
from src.pathtracer.geometry.sphere import HitRecord
from src.pathtracer.materials.dielectric import Dielectric, scatter_dielectric
from src.pathtracer.materials.lambertian import Lambertian, scatter_lambertian
from src.pathtracer.materials.metal import Metal, scatter_metal

Material = Lambertian | Metal | Dielectric


class MaterialType(IntEnum):
    """Enumeration of supported material variants.

    Used as the tag for material dispatch in the path tracer.
    """

    LAMBERTIAN = 0
    METAL = 1
    DIELECTRIC = 2


_LAMBERTIAN = int(MaterialType.LAMBERTIAN)
_METAL = int(MaterialType.METAL)
_DIELECTRIC = int(MaterialType.DIELECTRIC)

# Maximum number of materials in the arena
MAX_MATERIALS = 4096

material_types = ti.field(dtype=ti.i32, shape=MAX_MATERIALS)
material_albedos = ti.Vector.field(3, dtype=ti.f64, shape=MAX_MATERIALS)
material_fuzz = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
material_refraction_indices = ti.field(dtype=ti.f64, shape=MAX_MATERIALS)
num_materials = ti.field(dtype=ti.i32, shape=())


def material_type_of(material: Material) -> MaterialType:
    """Get the variant tag for a host-side material value.

    Raises:
        TypeError: If the value is not one of the supported materials.
    """
    if isinstance(material, Lambertian):
        return MaterialType.LAMBERTIAN
    if isinstance(material, Metal):
        return MaterialType.METAL
    if isinstance(material, Dielectric):
        return MaterialType.DIELECTRIC
    raise TypeError(f"Unsupported material: {material!r}")


def clear_materials() -> None:
    """Reset the material count to zero."""
    num_materials[None] = 0


def upload_materials(materials: list[Material]) -> None:
    """Replace the arena contents with the given materials.

    Material ids are positions in the list.

    Args:
        materials: Materials in id order.

    Raises:
        RuntimeError: If the maximum number of materials is exceeded.
    """
    count = len(materials)
    if count > MAX_MATERIALS:
        raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")

    types = np.zeros(MAX_MATERIALS, dtype=np.int32)
    albedos = np.zeros((MAX_MATERIALS, 3), dtype=np.float64)
    fuzz = np.zeros(MAX_MATERIALS, dtype=np.float64)
    refraction_indices = np.ones(MAX_MATERIALS, dtype=np.float64)

    for idx, material in enumerate(materials):
        types[idx] = int(material_type_of(material))
        if isinstance(material, (Lambertian, Metal)):
            albedos[idx] = material.albedo
        if isinstance(material, Metal):
            fuzz[idx] = material.fuzz
        if isinstance(material, Dielectric):
            refraction_indices[idx] = material.refraction_index

    material_types.from_numpy(types)
    material_albedos.from_numpy(albedos)
    material_fuzz.from_numpy(fuzz)
    material_refraction_indices.from_numpy(refraction_indices)
    num_materials[None] = count


def get_material_count() -> int:
    """Get the number of materials in the arena."""
    return int(num_materials[None])


@ti.func
def get_material_type(material_id: ti.i32) -> ti.i32:
    """Get the variant tag for a material id, or -1 for invalid ids."""
    result = -1
    if 0 <= material_id < num_materials[None]:
        result = material_types[material_id]
    return result


@ti.func
def scatter(incident_direction: vec3, rec: HitRecord, stream: ti.i32):
    """Scatter an incoming ray off the material of a hit.

    Args:
        incident_direction: The incoming ray direction.
        rec: The hit record (supplies material_id, normal and front_face).
        stream: The random stream to draw from.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where
        did_scatter is 0 if the ray was absorbed. The scattered ray starts at
        rec.point.
    """
    material_id = rec.material_id
    mat_type = get_material_type(material_id)

    # Default values
    scattered_direction = vec3(0.0, 0.0, 0.0)
    attenuation = vec3(0.0, 0.0, 0.0)
    did_scatter = 0

    if mat_type == _LAMBERTIAN:
        scattered_direction, attenuation, did_scatter = scatter_lambertian(
            material_albedos[material_id], rec.normal, stream
        )

    elif mat_type == _METAL:
        scattered_direction, attenuation, did_scatter = scatter_metal(
            material_albedos[material_id],
            material_fuzz[material_id],
            incident_direction,
            rec.normal,
            stream,
        )

    elif mat_type == _DIELECTRIC:
        scattered_direction, attenuation, did_scatter = scatter_dielectric(
            material_refraction_indices[material_id],
            incident_direction,
            rec.normal,
            rec.front_face,
            stream,
        )

    return scattered_direction, attenuation, did_scatter
