"""Camera module for view and ray generation.

Components:
    thin_lens: Perspective camera with depth of field

Camera responsibilities:
    - Transform (s, t) image coordinates to world-space rays
    - Support look-at positioning with up vector
    - Sample the lens aperture for defocus blur

Ray generation uses normalized image coordinates:
    s in [0, 1]: left to right across image
    t in [0, 1]: bottom to top across image
"""

from .thin_lens import (
    Camera,
    get_camera_info,
    get_ray,
    setup_camera,
)

__all__ = [
    "Camera",
    "setup_camera",
    "get_ray",
    "get_camera_info",
]
