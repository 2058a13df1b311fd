#!/usr/bin/env python3
"""Render one of the preset sphere scenes.

This script demonstrates end-to-end rendering with the path tracer. It
builds a preset scene, renders it with the row-band parallel renderer and
writes the framebuffer as PNG or PPM.

Usage:
    python -m examples.render_spheres [options]

Options:
    --scene {random,three}  Preset scene to render (default: random)
    --width WIDTH           Image width in pixels (default: 400)
    --samples SAMPLES       Number of samples per pixel (default: 100)
    --max-depth DEPTH       Maximum number of bounces (default: 50)
    --workers WORKERS       Number of row bands (default: CPU count)
    --seed SEED             Random seed for scene and render (default: random)
    --arch {cpu,gpu}        Taichi backend (default: cpu)
    --output OUTPUT         Output file path, .png or .ppm (default: spheres.png)
    --quiet                 Suppress progress output

The image height follows from the width and the scene's aspect ratio.

Example:
    python -m examples.render_spheres --scene three --width 200 --samples 20
"""

from __future__ import annotations

import argparse
import os
import sys
import time
from pathlib import Path

SCENES = ("random", "three")


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a preset sphere scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--scene",
        choices=SCENES,
        default="random",
        help="Preset scene to render (default: random)",
    )
    parser.add_argument(
        "--width",
        type=int,
        default=400,
        help="Image width in pixels (default: 400)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=100,
        help="Number of samples per pixel (default: 100)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=50,
        help="Maximum number of bounces (default: 50)",
    )
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Number of row bands rendered in parallel (default: CPU count)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for scene layout and sampling (default: random)",
    )
    parser.add_argument(
        "--arch",
        choices=("cpu", "gpu"),
        default="cpu",
        help="Taichi backend (default: cpu)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="spheres.png",
        help="Output file path, .png or .ppm (default: spheres.png)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args()


def render_spheres(
    scene_name: str = "random",
    width: int = 400,
    num_samples: int = 100,
    max_depth: int = 50,
    workers: int | None = None,
    seed: int | None = None,
    output_path: str = "spheres.png",
    quiet: bool = False,
) -> Path:
    """Render a preset scene and save it to a file.

    Args:
        scene_name: "random" or "three".
        width: Image width in pixels.
        num_samples: Number of samples per pixel.
        max_depth: Maximum number of bounces.
        workers: Number of row bands. None uses the CPU count.
        seed: Random seed for the scene layout and the render.
        output_path: Output file path (.png or .ppm).
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from src.pathtracer.core.renderer import render
    from src.pathtracer.output.export import save_image
    from src.pathtracer.scene.presets import random_scene, three_spheres_scene

    if scene_name == "three":
        scene, camera = three_spheres_scene()
    else:
        scene, camera = random_scene(seed)

    height = max(1, round(width / camera.aspect_ratio))
    workers = workers if workers is not None else (os.cpu_count() or 1)

    if not quiet:
        print(f"Scene '{scene_name}': {scene.get_sphere_count()} spheres, {scene.get_material_count()} materials")
        print(f"Rendering {width}x{height} at {num_samples} spp, depth {max_depth}, {workers} workers...")

    start_time = time.time()
    framebuffer = render(
        scene,
        camera,
        image_width=width,
        image_height=height,
        samples_per_pixel=num_samples,
        max_depth=max_depth,
        worker_count=workers,
        seed=seed,
    )
    render_time = time.time() - start_time

    output_file = Path(output_path)
    save_image(framebuffer, output_file)

    if not quiet:
        samples_per_sec = (width * height * num_samples) / render_time if render_time > 0 else 0
        print(f"Rendered in {render_time:.2f}s ({samples_per_sec:.0f} samples/s)")
        print(f"Saved to: {output_file.absolute()}")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    from src.pathtracer.core.runtime import init_runtime

    init_runtime(args.arch)
    if not args.quiet:
        print(f"Requested {args.arch.upper()} backend")

    try:
        render_spheres(
            scene_name=args.scene,
            width=args.width,
            num_samples=args.samples,
            max_depth=args.max_depth,
            workers=args.workers,
            seed=args.seed,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())
