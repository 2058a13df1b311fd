"""Image export for finished framebuffers.

Supported formats:
    - PNG (8-bit RGB via Pillow)
    - PPM (plain-text P3, top row first)

The framebuffer is already gamma corrected and quantized by the renderer,
so export writes its bytes unchanged.

Example:
    >>> from src.pathtracer.output.export import save_image
    >>> fb = render(scene, camera, 400, 225, samples_per_pixel=100, max_depth=50)
    >>> save_image(fb, "spheres.png")
"""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from PIL import Image as PILImage

if TYPE_CHECKING:
    from src.pathtracer.core.renderer import Framebuffer

# Largest channel value written in the PPM header
PPM_MAX_VALUE = 255


def save_png(framebuffer: Framebuffer, filepath: str | Path) -> None:
    """Save a framebuffer as an 8-bit RGB PNG file.

    Args:
        framebuffer: The rendered framebuffer.
        filepath: Output file path.
    """
    pil_image = PILImage.fromarray(framebuffer.pixels)
    pil_image.save(filepath, format="PNG")


def format_ppm(framebuffer: Framebuffer) -> str:
    """Format a framebuffer as plain-text PPM (P3).

    The header is "P3", then "width height", then the max value 255. Each
    following line holds one pixel as "r g b", rows from top to bottom.
    """
    lines = ["P3", f"{framebuffer.width} {framebuffer.height}", str(PPM_MAX_VALUE)]
    for row in framebuffer.pixels:
        lines.extend(f"{r} {g} {b}" for r, g, b in row.tolist())
    return "\n".join(lines) + "\n"


def save_ppm(framebuffer: Framebuffer, filepath: str | Path) -> None:
    """Save a framebuffer as a plain-text PPM (P3) file.

    Args:
        framebuffer: The rendered framebuffer.
        filepath: Output file path.
    """
    Path(filepath).write_text(format_ppm(framebuffer), encoding="ascii")


def save_image(framebuffer: Framebuffer, filepath: str | Path) -> None:
    """Save a framebuffer, choosing the format from the file suffix.

    Args:
        framebuffer: The rendered framebuffer.
        filepath: Output path ending in .png or .ppm.

    Raises:
        ValueError: If the suffix is not a supported format.
    """
    suffix = Path(filepath).suffix.lower()
    if suffix == ".png":
        save_png(framebuffer, filepath)
    elif suffix == ".ppm":
        save_ppm(framebuffer, filepath)
    else:
        raise ValueError(f"Unsupported image format: {suffix or '(none)'} (expected .png or .ppm)")
