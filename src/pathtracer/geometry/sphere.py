"""Sphere primitive and ray-sphere intersection.

This module provides the Sphere dataclass, the HitRecord produced by every
intersection query, and the closed-form ray-sphere intersection routine.

The ray-sphere intersection is found by solving:
    |origin + t * direction - center|^2 = radius^2

which is the quadratic a*t^2 + 2*h*t + c = 0 with:
    oc = origin - center
    a = dot(direction, direction)
    h = dot(direction, oc)  (half of the traditional b)
    c = dot(oc, oc) - radius^2

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtracer.geometry.sphere import Sphere, hit_sphere
    >>> sphere = Sphere(center=vec3(0, 0, -1), radius=0.5, material_id=0)
    >>> # Use hit_sphere within a Taichi kernel
"""

import taichi as ti

from src.pathtracer.core.ray import Ray, ray_at, vec3


@ti.dataclass
class Sphere:
    """A sphere defined by center point, radius and material.

    Attributes:
        center: The center point of the sphere (vec3).
        radius: The radius of the sphere (positive).
        material_id: Index of the sphere's material in the material arena.
    """

    center: vec3
    radius: ti.f64
    material_id: ti.i32


@ti.dataclass
class HitRecord:
    """Record of a ray-primitive intersection.

    Attributes:
        hit: 1 if the ray intersected a primitive, 0 for no intersection.
            All other fields are only valid if hit == 1.
        t: The ray parameter at the intersection.
        point: The 3D intersection point.
        normal: The unit surface normal, always oriented against the
            incoming ray (dot(direction, normal) <= 0).
        front_face: 1 if the ray hit the outside of the surface, 0 if it hit
            from inside. Set together with normal by set_face_normal().
        material_id: The material of the hit primitive.
    """

    hit: ti.i32
    t: ti.f64
    point: vec3
    normal: vec3
    front_face: ti.i32
    material_id: ti.i32


@ti.func
def make_miss_record() -> HitRecord:
    """Create a HitRecord indicating no intersection."""
    return HitRecord(
        hit=0,
        t=0.0,
        point=vec3(0.0, 0.0, 0.0),
        normal=vec3(0.0, 0.0, 0.0),
        front_face=0,
        material_id=-1,
    )


@ti.func
def set_face_normal(ray_direction: vec3, outward_normal: vec3):
    """Orient a normal against the incoming ray.

    Args:
        ray_direction: The direction of the incoming ray.
        outward_normal: The geometric normal pointing out of the surface.

    Returns:
        A tuple (front_face, normal) where front_face is 1 when the ray
        arrives from outside and normal points against the ray.
    """
    front_face = 0
    normal = -outward_normal
    if ray_direction.dot(outward_normal) < 0.0:
        front_face = 1
        normal = outward_normal
    return front_face, normal


@ti.func
def hit_sphere(ray: Ray, sphere: Sphere, t_min: ti.f64, t_max: ti.f64) -> HitRecord:
    """Test for the nearest ray-sphere intersection in [t_min, t_max].

    The near root is tried first and the far root only if the near one is
    outside the interval, so the returned t is the smallest qualifying root.
    A negative discriminant is a miss, not an error.

    Args:
        ray: The ray to test.
        sphere: The sphere to test intersection against.
        t_min: Minimum accepted t (inclusive).
        t_max: Maximum accepted t (inclusive).

    Returns:
        A HitRecord; check the hit field to determine if intersection occurred.
    """
    oc = ray.origin - sphere.center
    a = ray.direction.dot(ray.direction)
    half_b = ray.direction.dot(oc)
    c = oc.dot(oc) - sphere.radius * sphere.radius
    discriminant = half_b * half_b - a * c

    # Taichi requires outer-scope declaration
    result = make_miss_record()

    if discriminant >= 0.0:
        sqrt_d = ti.sqrt(discriminant)

        root = (-half_b - sqrt_d) / a
        valid = t_min <= root and root <= t_max
        if not valid:
            root = (-half_b + sqrt_d) / a
            valid = t_min <= root and root <= t_max

        if valid:
            point = ray_at(ray, root)
            outward_normal = (point - sphere.center) / sphere.radius
            front_face, normal = set_face_normal(ray.direction, outward_normal)
            result = HitRecord(
                hit=1,
                t=root,
                point=point,
                normal=normal,
                front_face=front_face,
                material_id=sphere.material_id,
            )

    return result


@ti.func
def make_sphere(center: vec3, radius: ti.f64, material_id: ti.i32) -> Sphere:
    """Create a sphere from center, radius and material id."""
    return Sphere(center=center, radius=radius, material_id=material_id)
