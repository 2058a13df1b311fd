"""Dielectric (glass/water) material implementation.

This module models transparent materials that both reflect and refract.

Key physics:
    - Snell's law for refraction: n1 * sin(theta1) = n2 * sin(theta2)
    - Schlick's approximation for Fresnel reflectance
    - Total internal reflection when (n1 / n2) * sin(theta1) > 1

When refraction is possible the material picks reflection or refraction at
random, with the reflection probability given by Schlick's approximation.
Under total internal reflection the ray always reflects and no random number
is drawn.

Example:
    >>> from src.pathtracer.materials.dielectric import Dielectric
    >>> glass = Dielectric(refraction_index=1.5)
    >>> # Within a Taichi kernel:
    >>> # direction, attenuation, did_scatter = scatter_dielectric(
    >>> #     refraction_index, incident_dir, normal, front_face, stream
    >>> # )
"""

from dataclasses import dataclass

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.ray import normalize, reflect, reflectance, refract, vec3
from src.pathtracer.core.rng import random_double


@dataclass(frozen=True)
class Dielectric:
    """Dielectric material parameters.

    Attributes:
        refraction_index: Index of refraction relative to the surrounding
            medium. Common values: water 1.33, glass 1.5, diamond 2.4.
            Values below 1 model a bubble of thinner medium.
    """

    refraction_index: float = 1.5

    def __post_init__(self) -> None:
        if not self.refraction_index > 0.0:
            raise ValueError(
                f"Index of refraction = {self.refraction_index} must be positive."
            )
        object.__setattr__(self, "refraction_index", float(self.refraction_index))


@ti.func
def _refraction_ratio(refraction_index: ti.f64, front_face: ti.i32) -> ti.f64:
    """Ratio of indices for a ray entering (front face) or leaving the medium."""
    ratio = refraction_index
    if front_face == 1:
        ratio = 1.0 / refraction_index
    return ratio


@ti.func
def cannot_refract(
    refraction_index: ti.f64,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
) -> ti.i32:
    """Determine if total internal reflection will occur.

    Args:
        refraction_index: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing the incoming ray.
        front_face: 1 if the ray hits the outside of the surface.

    Returns:
        1 if refraction is impossible, 0 otherwise.
    """
    ratio = _refraction_ratio(refraction_index, front_face)
    unit_direction = normalize(incident_direction)
    cos_theta = tm.min(-unit_direction.dot(normal), 1.0)
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)
    return ratio * sin_theta > 1.0


@ti.func
def scatter_dielectric(
    refraction_index: ti.f64,
    incident_direction: vec3,
    normal: vec3,
    front_face: ti.i32,
    stream: ti.i32,
):
    """Compute the scattered ray direction for a dielectric surface.

    Args:
        refraction_index: Index of refraction of the material.
        incident_direction: The incoming ray direction (any length).
        normal: The unit surface normal, facing the incoming ray.
        front_face: 1 if the ray is entering the material, 0 if leaving it.
        stream: The random stream to draw from.

    Returns:
        A tuple of (scattered_direction, attenuation, did_scatter) where
        attenuation is white and did_scatter is always 1.
    """
    attenuation = vec3(1.0, 1.0, 1.0)
    ratio = _refraction_ratio(refraction_index, front_face)

    unit_direction = normalize(incident_direction)
    cos_theta = tm.min(-unit_direction.dot(normal), 1.0)
    sin_theta = ti.sqrt(1.0 - cos_theta * cos_theta)

    scattered_direction = vec3(0.0, 0.0, 0.0)
    if ratio * sin_theta > 1.0:
        scattered_direction = reflect(unit_direction, normal)
    else:
        if random_double(stream) < reflectance(cos_theta, ratio):
            scattered_direction = reflect(unit_direction, normal)
        else:
            scattered_direction = refract(unit_direction, normal, ratio)

    return scattered_direction, attenuation, 1
