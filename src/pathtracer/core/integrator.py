"""Path tracing estimator for Monte Carlo light transport.

This module implements ray_color, the estimator that follows one light path
from a camera ray through the scene. It is defined recursively:

    ray_color(ray, 0)     = black
    ray_color(ray, depth) = sky(ray)                              if the ray escapes
                          = black                                 if the hit absorbs it
                          = attenuation * ray_color(scattered, depth - 1)   otherwise

Taichi functions cannot recurse, so the recursion is unrolled into a loop of
at most max_depth bounces that carries the product of attenuations along the
path. Exhausting the bounce budget leaves the result black.

Intersections are searched in [T_MIN, T_MAX]. T_MIN is slightly above zero
so a scattered ray cannot re-hit its own origin through round-off
("shadow acne").

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtracer.core.integrator import trace_ray
    >>> # after uploading a scene and seeding stream 0:
    >>> trace_ray((0, 0, 0), (0, 0, -1), max_depth=50)
"""

import math

import taichi as ti

from src.pathtracer.core.ray import Ray, normalize, vec3
from src.pathtracer.materials.material import scatter
from src.pathtracer.scene.intersection import intersect_scene

# =============================================================================
# Rendering Constants
# =============================================================================

# t_min and t_max for ray intersection
T_MIN = 0.001
T_MAX = math.inf

# Sky gradient endpoints (horizon to zenith)
SKY_HORIZON = (1.0, 1.0, 1.0)
SKY_ZENITH = (0.5, 0.7, 1.0)


@ti.func
def sky_color(direction: vec3) -> vec3:
    """Background radiance for a ray that escapes the scene.

    Linear blend from white to sky blue driven by the height of the
    normalized direction.

    Args:
        direction: The ray direction (any non-zero length).

    Returns:
        The sky color for that direction.
    """
    unit_direction = normalize(direction)
    a = 0.5 * (unit_direction.y + 1.0)
    horizon = vec3(SKY_HORIZON[0], SKY_HORIZON[1], SKY_HORIZON[2])
    zenith = vec3(SKY_ZENITH[0], SKY_ZENITH[1], SKY_ZENITH[2])
    return (1.0 - a) * horizon + a * zenith


@ti.func
def ray_color(ray: Ray, max_depth: ti.i32, stream: ti.i32) -> vec3:
    """Estimate the radiance carried back along a ray.

    Args:
        ray: The ray to trace.
        max_depth: Maximum number of bounces. 0 returns black.
        stream: The random stream used for scattering decisions.

    Returns:
        The estimated color (RGB, not clamped).
    """
    radiance = vec3(0.0, 0.0, 0.0)

    # Product of attenuations along the path so far
    throughput = vec3(1.0, 1.0, 1.0)

    origin = ray.origin
    direction = ray.direction

    # Active flag for path continuation
    active = 1

    for _ in range(max_depth):
        if active == 1:
            rec = intersect_scene(Ray(origin=origin, direction=direction), T_MIN, T_MAX)

            if rec.hit == 0:
                # Ray escaped
                radiance = throughput * sky_color(direction)
                active = 0
            else:
                scattered_direction, attenuation, did_scatter = scatter(direction, rec, stream)

                if did_scatter == 0:
                    # Absorbed
                    active = 0
                else:
                    throughput *= attenuation
                    origin = rec.point
                    direction = scattered_direction

    return radiance


@ti.kernel
def _trace_ray_kernel(origin: vec3, direction: vec3, max_depth: ti.i32, stream: ti.i32) -> vec3:
    return ray_color(Ray(origin=origin, direction=direction), max_depth, stream)


def trace_ray(
    origin: tuple[float, float, float],
    direction: tuple[float, float, float],
    max_depth: int,
    stream: int = 0,
) -> tuple[float, float, float]:
    """Trace a single ray against the uploaded scene.

    This is a Python-callable function for testing and diagnostics. For
    images, use core.renderer.render().

    Args:
        origin: Ray origin.
        direction: Ray direction (non-zero).
        max_depth: Maximum number of bounces.
        stream: The random stream to draw from (seed it first).

    Returns:
        Tuple of (R, G, B) color values.
    """
    color = _trace_ray_kernel(vec3(*origin), vec3(*direction), max_depth, stream)
    return (float(color[0]), float(color[1]), float(color[2]))
