"""Core rendering module.

This module contains the fundamental building blocks for path tracing:

Components:
    runtime: Taichi initialization (double precision)
    rng: Explicit per-stream random number generation
    ray: Ray data structure, vector algebra and random sampling
    integrator: The path-tracing estimator (ray_color)
    renderer: Row-band parallel renderer and framebuffer

The core module estimates the radiance arriving through each pixel by
averaging many stochastic light paths, each bounded by a bounce-depth limit.

All compute-intensive operations use Taichi kernels.
"""

# Note: submodules are NOT imported here. Modules other than runtime declare
# Taichi fields at import time and must only be imported after init_runtime().
#
# For rendering, use:
#   from src.pathtracer.core.runtime import init_runtime
#   init_runtime("cpu")
#   from src.pathtracer.core.renderer import render
