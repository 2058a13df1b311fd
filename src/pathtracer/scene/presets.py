"""Ready-made scenes with matching cameras.

This module provides factory functions for the two classic sphere scenes:

- three_spheres_scene: a large ground sphere with three spheres side by side
  (glass on the left, diffuse in the centre, metal on the right)
- random_scene: the "final render" cover scene with a 22x22 grid of small
  random spheres and three large feature spheres

Each factory returns (scene, camera). The camera's aspect ratio is the one
the scene is composed for; pass the same ratio to the renderer's width and
height.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtracer.scene.presets import random_scene
    >>> scene, camera = random_scene(seed=7)
    >>> scene.get_sphere_count() > 4
    True
"""

import math

import numpy as np

from src.pathtracer.camera.thin_lens import Camera
from src.pathtracer.scene.manager import Scene

# =============================================================================
# Scene Parameters
# =============================================================================

THREE_SPHERES_ASPECT_RATIO = 16.0 / 9.0
RANDOM_SCENE_ASPECT_RATIO = 3.0 / 2.0

# Grid of small spheres spans [-GRID_HALF_EXTENT, GRID_HALF_EXTENT) on x and z
GRID_HALF_EXTENT = 11
SMALL_SPHERE_RADIUS = 0.2

# Cumulative probabilities for the small sphere material choice
DIFFUSE_PROBABILITY = 0.8
METAL_PROBABILITY = 0.95

# Small spheres closer than this to the big metal sphere are skipped
CLEARANCE_POINT = (4.0, 0.2, 0.0)
CLEARANCE_RADIUS = 0.9


def three_spheres_scene() -> tuple[Scene, Camera]:
    """Create the three spheres scene.

    A ground sphere of radius 100 below three unit-diameter spheres at
    z = -1: glass (index 1.5) at x = -1, diffuse at x = 0, fuzzy gold metal
    at x = 1. The camera sits at the origin looking down -z with a 90 degree
    vertical field of view and no defocus blur.

    Returns:
        Tuple of (scene, camera).
    """
    scene = Scene()

    ground = scene.add_lambertian_material(albedo=(0.8, 0.8, 0.0))
    scene.add_sphere(center=(0.0, -100.5, -1.0), radius=100.0, material_id=ground)

    scene.add_dielectric_sphere(center=(-1.0, 0.0, -1.0), radius=0.5, refraction_index=1.5)
    scene.add_lambertian_sphere(center=(0.0, 0.0, -1.0), radius=0.5, albedo=(0.1, 0.2, 0.5))
    scene.add_metal_sphere(center=(1.0, 0.0, -1.0), radius=0.5, albedo=(0.8, 0.6, 0.2), fuzz=0.0)

    camera = Camera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, -1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=THREE_SPHERES_ASPECT_RATIO,
        aperture=0.0,
        focus_dist=1.0,
    )

    return scene, camera


def random_scene(seed: int | None = None) -> tuple[Scene, Camera]:
    """Create the random spheres cover scene.

    Small spheres are placed on a jittered grid. Each one is diffuse with
    probability 0.8 (albedo = product of two random colors), metal with
    probability 0.15 (albedo in [0.5, 1), fuzz in [0, 0.5)) and glass
    otherwise. Three large spheres are added last: glass in the centre,
    diffuse brown on the left and polished metal on the right.

    Args:
        seed: Seed for the scene layout. The same seed always builds the
            same scene. None draws fresh entropy.

    Returns:
        Tuple of (scene, camera).
    """
    rng = np.random.default_rng(seed)
    scene = Scene()

    ground = scene.add_lambertian_material(albedo=(0.5, 0.5, 0.5))
    scene.add_sphere(center=(0.0, -1000.0, 0.0), radius=1000.0, material_id=ground)

    # Glass is shared by every glass sphere
    glass = scene.add_dielectric_material(refraction_index=1.5)

    for a in range(-GRID_HALF_EXTENT, GRID_HALF_EXTENT):
        for b in range(-GRID_HALF_EXTENT, GRID_HALF_EXTENT):
            choose_mat = rng.random()
            center = (a + 0.9 * rng.random(), SMALL_SPHERE_RADIUS, b + 0.9 * rng.random())

            if math.dist(center, CLEARANCE_POINT) <= CLEARANCE_RADIUS:
                continue

            if choose_mat < DIFFUSE_PROBABILITY:
                albedo = rng.random(3) * rng.random(3)
                scene.add_lambertian_sphere(center, SMALL_SPHERE_RADIUS, tuple(albedo.tolist()))
            elif choose_mat < METAL_PROBABILITY:
                albedo = rng.uniform(0.5, 1.0, size=3)
                fuzz = rng.uniform(0.0, 0.5)
                scene.add_metal_sphere(center, SMALL_SPHERE_RADIUS, tuple(albedo.tolist()), float(fuzz))
            else:
                scene.add_sphere(center, SMALL_SPHERE_RADIUS, glass)

    scene.add_sphere(center=(0.0, 1.0, 0.0), radius=1.0, material_id=glass)
    scene.add_lambertian_sphere(center=(-4.0, 1.0, 0.0), radius=1.0, albedo=(0.4, 0.2, 0.1))
    scene.add_metal_sphere(center=(4.0, 1.0, 0.0), radius=1.0, albedo=(0.7, 0.6, 0.5), fuzz=0.0)

    camera = Camera(
        lookfrom=(13.0, 2.0, 3.0),
        lookat=(0.0, 0.0, 0.0),
        vup=(0.0, 1.0, 0.0),
        vfov=20.0,
        aspect_ratio=RANDOM_SCENE_ASPECT_RATIO,
        aperture=0.1,
        focus_dist=10.0,
    )

    return scene, camera
