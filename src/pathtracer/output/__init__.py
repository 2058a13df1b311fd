"""Output module for writing rendered images.

Components:
    export: PNG and PPM writers for framebuffers
"""

from .export import PPM_MAX_VALUE, format_ppm, save_image, save_png, save_ppm

__all__ = [
    "save_png",
    "save_ppm",
    "save_image",
    "format_ppm",
    "PPM_MAX_VALUE",
]
