"""Metal (specular reflective) material implementation.

This module implements specular reflection with optional fuzz. Perfect
metals (fuzz=0) produce mirror-like reflections, while fuzzier metals
perturb the reflected direction by a random point in a ball of radius fuzz.

The reflection formula is:
    R = I - 2(I . N)N

where I is the unit incident direction and N is the surface normal. A fuzzed
direction that ends up below the surface is absorbed.

Example:
    >>> from src.pathtracer.materials.metal import Metal
    >>> gold = Metal(albedo=(0.8, 0.6, 0.2), fuzz=0.3)
    >>> # Within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_metal(
    >>> #     albedo, fuzz, incident_dir, normal, stream
    >>> # )
"""

from dataclasses import dataclass

import taichi as ti

from src.pathtracer.core.ray import normalize, random_in_unit_sphere, reflect, vec3
from src.pathtracer.materials.lambertian import validate_albedo


@dataclass(frozen=True)
class Metal:
    """Metal (specular reflective) material parameters.

    Attributes:
        albedo: The reflective color (RGB, each component in [0, 1]).
        fuzz: The surface roughness. Values outside [0, 1] are clamped
            into that range.
    """

    albedo: tuple[float, float, float]
    fuzz: float = 0.0

    def __post_init__(self) -> None:
        validate_albedo(self.albedo)
        object.__setattr__(self, "albedo", tuple(float(c) for c in self.albedo))
        object.__setattr__(self, "fuzz", min(max(float(self.fuzz), 0.0), 1.0))


@ti.func
def scatter_metal(albedo: vec3, fuzz: ti.f64, incident_direction: vec3, normal: vec3, stream: ti.i32):
    """Compute the scattered ray direction for a metal surface.

    Args:
        albedo: The reflective color (RGB).
        fuzz: The surface roughness in [0, 1]. 0 = perfect mirror.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing the incoming ray.
        stream: The random stream to draw from.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where
        did_scatter is 0 if the fuzzed direction points below the surface.
    """
    reflected = reflect(normalize(incident_direction), normal)
    scattered_direction = reflected + fuzz * random_in_unit_sphere(stream)

    did_scatter = 0
    if scattered_direction.dot(normal) > 0.0:
        did_scatter = 1

    return scattered_direction, albedo, did_scatter
