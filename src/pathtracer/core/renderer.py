"""Parallel row-band renderer producing a finished 8-bit framebuffer.

The image is split into contiguous bands of rows, one per worker. A single
kernel launch is the fork/join point: its outermost loop, which Taichi runs
in parallel, iterates over bands, and each band walks its own rows serially.
Every framebuffer row is written by exactly one band, so no locking is
needed.

Random numbers come from one stream per image row (see core.rng). A row
always draws the same sequence regardless of which band owns it, so a
render with a given seed is identical for any worker count.

Pixel (col, row) uses row 0 at the top of the image. For each sample the
normalized camera coordinates are:

    s = (col + r1) / (width - 1)
    t = (height - 1 - row + r2) / (height - 1)

with r1, r2 uniform in [0, 1) and the denominators clamped to at least 1.
The averaged color is gamma corrected with sqrt, clamped to [0, 0.999] and
quantized as int(256 * x).

Example:
    >>> from src.pathtracer.core.runtime import init_runtime
    >>> init_runtime("cpu")
    >>> from src.pathtracer.core.renderer import render
    >>> from src.pathtracer.scene.presets import three_spheres_scene
    >>> scene, camera = three_spheres_scene()
    >>> fb = render(scene, camera, 400, 225, samples_per_pixel=100, max_depth=50)
    >>> fb.pixels.shape
    (225, 400, 3)
"""

import math
import os
from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from src.pathtracer.camera.thin_lens import Camera, get_ray, setup_camera
from src.pathtracer.core.integrator import ray_color
from src.pathtracer.core.ray import vec3
from src.pathtracer.core.rng import random_double, seed_streams

if TYPE_CHECKING:
    from src.pathtracer.scene.manager import Scene

# =============================================================================
# Render Target
# =============================================================================

# Maximum supported image dimensions (preallocated)
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Largest byte value is int(256 * 0.999) = 255
_MAX_INTENSITY = 0.999

# Final pixels, row-major with row 0 at the top of the image
_framebuffer = ti.field(dtype=ti.u8, shape=(MAX_IMAGE_HEIGHT, MAX_IMAGE_WIDTH, 3))


class RenderError(RuntimeError):
    """Raised when the render launch fails. No framebuffer is produced."""


class Framebuffer:
    """Finished 8-bit RGB image.

    Attributes:
        width: Image width in pixels.
        height: Image height in pixels.
        pixels: uint8 array of shape (height, width, 3), row 0 at the top.
    """

    def __init__(self, width: int, height: int, pixels: npt.NDArray[np.uint8]) -> None:
        if pixels.shape != (height, width, 3):
            raise ValueError(f"Expected pixel array of shape {(height, width, 3)}, got {pixels.shape}")
        self.width = width
        self.height = height
        self.pixels = pixels

    def pixel(self, col: int, row: int) -> tuple[int, int, int]:
        """Get the (R, G, B) bytes at a column and row."""
        r, g, b = self.pixels[row, col]
        return (int(r), int(g), int(b))

    def to_numpy(self) -> npt.NDArray[np.uint8]:
        """Get a copy of the pixel array."""
        return self.pixels.copy()

    def mean(self) -> float:
        """Mean byte value over all pixels and channels."""
        return float(self.pixels.mean())

    def __repr__(self) -> str:
        return f"Framebuffer(width={self.width}, height={self.height})"


# =============================================================================
# Work Partitioning
# =============================================================================


def partition_rows(height: int, worker_count: int) -> list[tuple[int, int]]:
    """Split image rows into contiguous bands, one per worker.

    Bands hold ceil(height / worker_count) rows each, the last band may be
    shorter. Workers beyond the number of rows get no band.

    Args:
        height: Number of image rows.
        worker_count: Number of parallel workers.

    Returns:
        List of (row_start, row_end) half-open ranges covering every row
        exactly once, in order.

    Raises:
        ValueError: If height or worker_count is not positive.
    """
    if height < 1 or worker_count < 1:
        raise ValueError(f"height and worker_count must be positive, got {height} and {worker_count}")

    band_rows = math.ceil(height / worker_count)
    return [(start, min(start + band_rows, height)) for start in range(0, height, band_rows)]


# =============================================================================
# Rendering Kernel
# =============================================================================


@ti.kernel
def _render_bands(
    width: ti.i32,
    height: ti.i32,
    band_rows: ti.i32,
    band_count: ti.i32,
    samples_per_pixel: ti.i32,
    max_depth: ti.i32,
):
    """Render all bands. Only this outermost loop runs in parallel."""
    s_scale = 1.0 / ti.cast(ti.max(width - 1, 1), ti.f64)
    t_scale = 1.0 / ti.cast(ti.max(height - 1, 1), ti.f64)

    ti.loop_config(block_dim=1)
    for band in range(band_count):
        row_start = band * band_rows
        row_end = ti.min(row_start + band_rows, height)

        for row in range(row_start, row_end):
            for col in range(width):
                total = vec3(0.0, 0.0, 0.0)
                for _ in range(samples_per_pixel):
                    s = (ti.cast(col, ti.f64) + random_double(row)) * s_scale
                    t = (ti.cast(height - 1 - row, ti.f64) + random_double(row)) * t_scale
                    total += ray_color(get_ray(s, t, row), max_depth, row)

                color = total / ti.cast(samples_per_pixel, ti.f64)

                # NaN samples become black, then gamma 2 and clamp
                for c in ti.static(range(3)):
                    if tm.isnan(color[c]):
                        color[c] = 0.0
                    value = tm.clamp(ti.sqrt(tm.max(color[c], 0.0)), 0.0, _MAX_INTENSITY)
                    _framebuffer[row, col, c] = ti.cast(256.0 * value, ti.u8)


# =============================================================================
# Public API
# =============================================================================


def _check_positive(name: str, value: int) -> None:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ValueError(f"{name} must be a positive integer, got {value!r}")


def render(
    scene: "Scene",
    camera: Camera,
    image_width: int,
    image_height: int,
    samples_per_pixel: int,
    max_depth: int,
    worker_count: int | None = None,
    seed: int | None = None,
) -> Framebuffer:
    """Render a scene into an 8-bit framebuffer.

    Uploads the scene and camera to device storage, seeds one random stream
    per row and launches the band-parallel kernel. The call returns once
    every band has finished.

    Args:
        scene: The scene to render (read-only during the render).
        camera: The camera to render through.
        image_width: Image width in pixels (max MAX_IMAGE_WIDTH).
        image_height: Image height in pixels (max MAX_IMAGE_HEIGHT).
        samples_per_pixel: Number of jittered samples averaged per pixel.
        max_depth: Maximum number of bounces per path.
        worker_count: Number of row bands. Defaults to os.cpu_count().
        seed: Top-level random seed. None draws fresh entropy.

    Returns:
        The finished Framebuffer.

    Raises:
        ValueError: If any numeric parameter is not a positive integer, or
            the image exceeds the maximum supported size.
        RenderError: If the kernel launch or synchronisation fails.
    """
    if worker_count is None:
        worker_count = os.cpu_count() or 1

    _check_positive("image_width", image_width)
    _check_positive("image_height", image_height)
    _check_positive("samples_per_pixel", samples_per_pixel)
    _check_positive("max_depth", max_depth)
    _check_positive("worker_count", worker_count)

    if image_width > MAX_IMAGE_WIDTH or image_height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({image_width}x{image_height}) exceed maximum "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )

    bands = partition_rows(image_height, worker_count)
    band_rows = bands[0][1] - bands[0][0]

    scene.upload()
    setup_camera(camera)
    seed_streams(seed, image_height)

    try:
        _render_bands(image_width, image_height, band_rows, len(bands), samples_per_pixel, max_depth)
        ti.sync()
    except Exception as exc:
        raise RenderError(f"Render of {image_width}x{image_height} image failed: {exc}") from exc

    pixels = _framebuffer.to_numpy()[:image_height, :image_width, :]
    return Framebuffer(image_width, image_height, np.ascontiguousarray(pixels))
