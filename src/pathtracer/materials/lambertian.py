"""Lambertian (ideal diffuse) material implementation.

Diffuse surfaces scatter toward ``normal + random_unit_vector()``, which
produces a cosine-weighted distribution of outgoing directions around the
normal. The attenuation is the material albedo and the ray is never absorbed.

Example:
    >>> from src.pathtracer.materials.lambertian import Lambertian
    >>> red = Lambertian(albedo=(0.8, 0.1, 0.1))
    >>> # Within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_lambertian(albedo, normal, stream)
"""

from dataclasses import dataclass

import taichi as ti

from src.pathtracer.core.ray import near_zero, random_unit_vector, vec3


def validate_albedo(albedo: tuple[float, float, float]) -> None:
    """Check that an albedo has three components in [0, 1].

    Raises:
        ValueError: If the albedo does not have 3 components or any component
            is outside [0, 1].
    """
    if len(albedo) != 3:
        raise ValueError(f"Albedo must have 3 components, got {len(albedo)}")
    for i, component in enumerate(albedo):
        if component < 0.0 or component > 1.0:
            raise ValueError(
                f"Albedo component {i} = {component} is outside [0, 1]. "
                "This would violate energy conservation."
            )


@dataclass(frozen=True)
class Lambertian:
    """Lambertian (ideal diffuse) material parameters.

    Attributes:
        albedo: The diffuse reflectance color (RGB, each component in [0, 1]).
    """

    albedo: tuple[float, float, float]

    def __post_init__(self) -> None:
        validate_albedo(self.albedo)
        object.__setattr__(self, "albedo", tuple(float(c) for c in self.albedo))


@ti.func
def scatter_lambertian(albedo: vec3, normal: vec3, stream: ti.i32):
    """Sample a scattered ray direction for a Lambertian surface.

    If the random unit vector nearly cancels the normal, the scatter
    direction falls back to the normal itself so the scattered ray never
    has a zero-length direction.

    Args:
        albedo: The diffuse reflectance color (RGB).
        normal: The unit surface normal at the hit point, facing the ray.
        stream: The random stream to draw from.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where
        did_scatter is always 1.
    """
    scatter_direction = normal + random_unit_vector(stream)
    if near_zero(scatter_direction):
        scatter_direction = normal
    return scatter_direction, albedo, 1
