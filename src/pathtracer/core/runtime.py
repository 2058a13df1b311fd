"""Taichi runtime initialization.

All device code in this package computes in double precision, so the
runtime must be initialized with ``default_fp=ti.f64`` before any module
holding Taichi fields is imported.

Example:
    >>> from src.pathtracer.core.runtime import init_runtime
    >>> init_runtime("cpu")
    >>> from src.pathtracer.core.renderer import render
"""

import taichi as ti

ARCHES = ("cpu", "gpu")


def init_runtime(arch: str = "cpu", debug: bool = False) -> None:
    """Initialize Taichi for rendering.

    Args:
        arch: "cpu" or "gpu". A GPU request falls back to the CPU backend
            when no GPU backend can be created.
        debug: Enable Taichi debug mode (bounds checks in kernels).

    Raises:
        ValueError: If arch is not one of ARCHES.
    """
    if arch not in ARCHES:
        raise ValueError(f"Unknown arch {arch!r}, expected one of {ARCHES}")

    if arch == "gpu":
        try:
            ti.init(arch=ti.gpu, default_fp=ti.f64, debug=debug)
            return
        except Exception:
            # No usable GPU backend on this machine
            pass

    ti.init(arch=ti.cpu, default_fp=ti.f64, debug=debug)
