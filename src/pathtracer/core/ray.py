"""Ray data structure and vector utilities for Monte Carlo ray tracing.

This module provides the fundamental Ray dataclass and the vector algebra
used by every other component. All operations are Taichi functions meant to
be called from within kernels, in double precision.

Random sampling routines take an explicit ``stream`` argument selecting the
generator they draw from (see ``core.rng``); none of them touch global random
state.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> origin = vec3(0.0, 0.0, 0.0)
    >>> direction = vec3(0.0, 0.0, -1.0)
    >>> ray = Ray(origin=origin, direction=direction)
    >>> point = ray_at(ray, 5.0)  # Point 5 units along the ray
"""

import taichi as ti
import taichi.math as tm

from src.pathtracer.core.rng import random_double, random_range

# 3-component double-precision vector, used for points, directions and colors
vec3 = ti.types.vector(3, ti.f64)

# Components below this magnitude are treated as zero by near_zero()
NEAR_ZERO_EPSILON = 1e-8


@ti.dataclass
class Ray:
    """A half-line with an origin point and direction vector.

    Attributes:
        origin: The starting point of the ray (vec3).
        direction: The direction vector of the ray (vec3). Need not be unit
            length; consumers normalize locally when they need to.
    """

    origin: vec3
    direction: vec3


@ti.func
def ray_at(ray: Ray, t: ti.f64) -> vec3:
    """Compute the point along the ray at parameter t.

    Args:
        ray: The ray to evaluate.
        t: The parameter value. Positive values are in front of the origin.

    Returns:
        The point ray.origin + t * ray.direction.
    """
    return ray.origin + t * ray.direction


@ti.func
def make_ray(origin: vec3, direction: vec3) -> Ray:
    """Create a ray from origin and direction."""
    return Ray(origin=origin, direction=direction)


# =============================================================================
# Vector Utility Functions
# =============================================================================


@ti.func
def length(v: vec3) -> ti.f64:
    """Compute the Euclidean length of a vector."""
    return ti.sqrt(v.dot(v))


@ti.func
def length_squared(v: vec3) -> ti.f64:
    """Compute the squared length of a vector."""
    return v.dot(v)


@ti.func
def normalize(v: vec3) -> vec3:
    """Normalize a vector to unit length.

    The input must have non-zero length; a zero vector yields NaN components.
    """
    return v / length(v)


@ti.func
def dot(a: vec3, b: vec3) -> ti.f64:
    """Compute the dot product a . b."""
    return a.dot(b)


@ti.func
def cross(a: vec3, b: vec3) -> vec3:
    """Compute the cross product a x b."""
    return tm.cross(a, b)


@ti.func
def near_zero(v: vec3) -> ti.i32:
    """Check if a vector is near zero in all components.

    Used to detect degenerate scatter directions.

    Args:
        v: The vector to check.

    Returns:
        1 if every component has magnitude below NEAR_ZERO_EPSILON, 0 otherwise.
    """
    s = NEAR_ZERO_EPSILON
    return ti.abs(v.x) < s and ti.abs(v.y) < s and ti.abs(v.z) < s


@ti.func
def reflect(incident: vec3, normal: vec3) -> vec3:
    """Reflect an incident vector about a unit normal.

    Computes incident - 2 * dot(incident, normal) * normal, which keeps the
    tangential component and flips the sign of the normal component.

    Args:
        incident: The incoming direction vector (pointing toward the surface).
        normal: The surface normal (unit length).

    Returns:
        The reflected direction vector.
    """
    return incident - 2.0 * incident.dot(normal) * normal


@ti.func
def refract(unit_direction: vec3, normal: vec3, etai_over_etat: ti.f64) -> vec3:
    """Refract a unit direction through a surface using Snell's law.

    The refracted ray is built from its components perpendicular and
    parallel to the normal. Callers must have ruled out total internal
    reflection beforehand.

    Args:
        unit_direction: The incoming direction (unit length).
        normal: The surface normal on the incident side (unit length).
        etai_over_etat: Ratio of refractive indices (incident / transmitted).

    Returns:
        The refracted direction (unit length up to rounding).
    """
    cos_theta = tm.min(-unit_direction.dot(normal), 1.0)
    r_out_perp = etai_over_etat * (unit_direction + cos_theta * normal)
    r_out_parallel = -ti.sqrt(ti.abs(1.0 - r_out_perp.dot(r_out_perp))) * normal
    return r_out_perp + r_out_parallel


@ti.func
def reflectance(cosine: ti.f64, ref_idx: ti.f64) -> ti.f64:
    """Compute Fresnel reflectance using Schlick's approximation.

    Args:
        cosine: Cosine of the angle between incident direction and normal.
        ref_idx: Ratio of refractive indices.

    Returns:
        The approximate probability of reflection.
    """
    r0 = (1.0 - ref_idx) / (1.0 + ref_idx)
    r0 = r0 * r0
    return r0 + (1.0 - r0) * ((1.0 - cosine) ** 5)


# =============================================================================
# Random Sampling Utilities for Monte Carlo
# =============================================================================


@ti.func
def random_vec(stream: ti.i32, lo: ti.f64, hi: ti.f64) -> vec3:
    """Generate a vector with each component uniform in [lo, hi)."""
    x = random_range(stream, lo, hi)
    y = random_range(stream, lo, hi)
    z = random_range(stream, lo, hi)
    return vec3(x, y, z)


@ti.func
def random_in_unit_sphere(stream: ti.i32) -> vec3:
    """Generate a uniformly distributed point inside the unit ball.

    Rejection sampling: points drawn from [-1, 1]^3 are resampled while
    their squared length is >= 1.

    Args:
        stream: The random stream to draw from.

    Returns:
        A random point with length < 1.
    """
    p = vec3(1.0, 1.0, 1.0)
    while length_squared(p) >= 1.0:
        p = random_vec(stream, -1.0, 1.0)
    return p


@ti.func
def random_unit_vector(stream: ti.i32) -> vec3:
    """Generate a random unit vector (normalized in-ball sample)."""
    return normalize(random_in_unit_sphere(stream))


@ti.func
def random_in_hemisphere(stream: ti.i32, normal: vec3) -> vec3:
    """Generate a random in-ball point on the same side as a normal.

    Args:
        stream: The random stream to draw from.
        normal: The reference normal defining the hemisphere.

    Returns:
        A random point inside the unit ball with dot(result, normal) >= 0.
    """
    in_unit_sphere = random_in_unit_sphere(stream)
    result = in_unit_sphere
    if in_unit_sphere.dot(normal) < 0.0:
        result = -in_unit_sphere
    return result


@ti.func
def random_in_unit_disk(stream: ti.i32) -> vec3:
    """Generate a random point inside the unit disk in the xy-plane.

    Used for the lens sample of depth-of-field cameras.

    Returns:
        A random point (x, y, 0) with x^2 + y^2 < 1.
    """
    p = vec3(1.0, 1.0, 0.0)
    while length_squared(p) >= 1.0:
        x = random_range(stream, -1.0, 1.0)
        y = random_range(stream, -1.0, 1.0)
        p = vec3(x, y, 0.0)
    return p
