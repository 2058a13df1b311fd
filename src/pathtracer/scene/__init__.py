"""Scene module for scene storage, building and presets.

Components:
    intersection: Sphere storage in Taichi fields and nearest-hit queries
    manager: Host-side Scene builder with a material arena
    presets: Ready-made scenes with matching cameras

Scene data is organized for efficient device access:
    - Structure-of-Arrays layout for sphere data
    - Spheres refer to materials by arena index
"""

from .intersection import (
    MAX_SPHERES,
    clear_scene,
    get_sphere_count,
    intersect_scene,
    upload_spheres,
)
from .manager import Scene, SceneConfig, SphereInfo
from .presets import random_scene, three_spheres_scene

__all__ = [
    # Intersection module
    "MAX_SPHERES",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "upload_spheres",
    # Manager module
    "Scene",
    "SceneConfig",
    "SphereInfo",
    # Presets
    "three_spheres_scene",
    "random_scene",
]
