"""Scene-level primitive intersection testing.

The scene stores spheres in Taichi fields (Structure of Arrays) and answers
nearest-hit queries by scanning every sphere. Each accepted hit narrows the
search interval, so later spheres can only win with a strictly closer or
equal t.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtracer.scene.intersection import upload_spheres, intersect_scene
    >>> upload_spheres([((0.0, 0.0, -1.0), 0.5, 0)])
    >>> # Use intersect_scene within a Taichi kernel
"""

from collections.abc import Sequence

import numpy as np
import taichi as ti

from src.pathtracer.core.ray import Ray
from src.pathtracer.geometry.sphere import HitRecord, Sphere, hit_sphere, make_miss_record

# Maximum number of primitives supported in the scene
MAX_SPHERES = 4096

# Sphere storage: Structure of Arrays layout
sphere_centers = ti.Vector.field(3, dtype=ti.f64, shape=MAX_SPHERES)
sphere_radii = ti.field(dtype=ti.f64, shape=MAX_SPHERES)
sphere_material_ids = ti.field(dtype=ti.i32, shape=MAX_SPHERES)
num_spheres = ti.field(dtype=ti.i32, shape=())

SphereRow = tuple[tuple[float, float, float], float, int]


def clear_scene() -> None:
    """Remove all spheres from the scene.

    Resets the sphere count to zero. Field data is overwritten by the next
    upload.
    """
    num_spheres[None] = 0


def upload_spheres(spheres: Sequence[SphereRow]) -> None:
    """Replace the stored spheres in one transfer.

    Args:
        spheres: (center, radius, material_id) rows in insertion order.

    Raises:
        RuntimeError: If the maximum number of spheres is exceeded.
    """
    count = len(spheres)
    if count > MAX_SPHERES:
        raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")

    centers = np.zeros((MAX_SPHERES, 3), dtype=np.float64)
    radii = np.ones(MAX_SPHERES, dtype=np.float64)
    material_ids = np.full(MAX_SPHERES, -1, dtype=np.int32)
    for idx, (center, radius, material_id) in enumerate(spheres):
        centers[idx] = center
        radii[idx] = radius
        material_ids[idx] = material_id

    sphere_centers.from_numpy(centers)
    sphere_radii.from_numpy(radii)
    sphere_material_ids.from_numpy(material_ids)
    num_spheres[None] = count


def get_sphere_count() -> int:
    """Get the number of spheres in the scene."""
    return int(num_spheres[None])


@ti.func
def intersect_scene(ray: Ray, t_min: ti.f64, t_max: ti.f64) -> HitRecord:
    """Find the closest intersection of a ray with all spheres.

    Args:
        ray: The ray to test.
        t_min: Minimum t value to consider a valid hit.
        t_max: Maximum t value to consider a valid hit.

    Returns:
        The HitRecord of the closest intersection, or a miss record
        (hit == 0) if no sphere was hit.
    """
    closest_t = t_max
    result = make_miss_record()

    for i in range(num_spheres[None]):
        sphere = Sphere(
            center=sphere_centers[i],
            radius=sphere_radii[i],
            material_id=sphere_material_ids[i],
        )
        rec = hit_sphere(ray, sphere, t_min, closest_t)
        if rec.hit == 1:
            closest_t = rec.t
            result = rec

    return result
