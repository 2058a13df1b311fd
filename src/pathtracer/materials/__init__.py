"""Materials module for surface scattering models.

Components:
    lambertian: Ideal diffuse reflection
    metal: Specular reflection with optional fuzz
    dielectric: Glass-like materials with refraction (Schlick reflectance)
    material: Material arena, variant tags and scatter dispatch

Each material provides a host-side frozen dataclass holding validated
parameters and a Taichi function returning
(scattered_direction, attenuation, did_scatter).
"""

from .dielectric import Dielectric, cannot_refract, scatter_dielectric
from .lambertian import Lambertian, scatter_lambertian, validate_albedo
from .material import (
    MAX_MATERIALS,
    Material,
    MaterialType,
    clear_materials,
    get_material_count,
    get_material_type,
    material_type_of,
    scatter,
    upload_materials,
)
from .metal import Metal, scatter_metal

__all__ = [
    # Lambertian
    "Lambertian",
    "scatter_lambertian",
    "validate_albedo",
    # Metal
    "Metal",
    "scatter_metal",
    # Dielectric
    "Dielectric",
    "scatter_dielectric",
    "cannot_refract",
    # Arena and dispatch
    "Material",
    "MaterialType",
    "MAX_MATERIALS",
    "clear_materials",
    "upload_materials",
    "get_material_count",
    "get_material_type",
    "material_type_of",
    "scatter",
]
