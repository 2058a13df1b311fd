"""Taichi implementation of a Monte Carlo sphere path tracer.

This package renders scenes of spheres with diffuse, metal and glass
materials by stochastically sampling light paths, with support for:
- Thin-lens camera with depth of field
- Per-row random streams for reproducible renders
- Row-band parallel rendering into a shared framebuffer

Subpackages:
    core: Vector utilities, random streams, the estimator and the renderer
    geometry: Sphere primitive and hit records
    materials: Lambertian, metal and dielectric scattering
    scene: Scene builder, primitive storage and preset scenes
    camera: Thin-lens camera with ray generation
    output: PNG/PPM export of rendered framebuffers
"""

__version__ = "0.1.0"
