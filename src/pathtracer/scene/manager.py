"""Scene builder coordinating spheres and materials.

This module provides the host-side Scene container. It keeps an
insertion-ordered material arena and an insertion-ordered list of spheres
referring to materials by id, and writes both into the Taichi fields used by
the path tracer when upload() is called.

The Scene maintains:
- A material_id space (positions in the material arena)
- Validation of primitive and material parameters at construction time
- High-level methods for adding objects with materials in one call
- Scene serialization/configuration support

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu, default_fp=ti.f64)
    >>> from src.pathtracer.scene.manager import Scene
    >>> scene = Scene()
    >>> mat_id = scene.add_lambertian_material(albedo=(0.8, 0.3, 0.3))
    >>> scene.add_sphere(center=(0, 0, -1), radius=0.5, material_id=mat_id)
    >>> scene.upload()
"""

from collections.abc import Iterable
from dataclasses import dataclass, field
from typing import Any

from src.pathtracer.materials.dielectric import Dielectric
from src.pathtracer.materials.lambertian import Lambertian
from src.pathtracer.materials.material import (
    MAX_MATERIALS,
    Material,
    MaterialType,
    material_type_of,
    upload_materials,
)
from src.pathtracer.materials.metal import Metal
from src.pathtracer.scene.intersection import MAX_SPHERES, upload_spheres


@dataclass(frozen=True)
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        center: The center of the sphere.
        radius: The radius of the sphere (positive).
        material_id: The material ID assigned to the sphere.
    """

    center: tuple[float, float, float]
    radius: float
    material_id: int


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        materials: List of material configurations.
        spheres: List of sphere configurations.
    """

    materials: list[dict[str, Any]] = field(default_factory=list)
    spheres: list[dict[str, Any]] = field(default_factory=list)


def _as_point(values: Iterable[float]) -> tuple[float, float, float]:
    point = tuple(float(v) for v in values)
    if len(point) != 3:
        raise ValueError(f"Expected 3 components, got {len(point)}")
    return point  # type: ignore[return-value]


class Scene:
    """Insertion-ordered collection of spheres and their materials.

    The scene only grows by appending. It is read-only while a render is
    running; upload() copies it into device storage.

    Attributes:
        materials: Material values in id order.
        spheres: SphereInfo for all spheres, in insertion order.

    Example:
        >>> scene = Scene()
        >>> glass = scene.add_dielectric_material(refraction_index=1.5)
        >>> scene.add_sphere((-1, 0, -1), 0.5, glass)
        >>> scene.add_sphere((-1, 0, -1), -0.45, glass)  # raises ValueError
    """

    def __init__(self) -> None:
        """Initialize an empty scene."""
        self.materials: list[Material] = []
        self.spheres: list[SphereInfo] = []

    @classmethod
    def from_pairs(
        cls,
        pairs: Iterable[tuple[tuple[tuple[float, float, float], float], Material]],
    ) -> "Scene":
        """Build a scene from an ordered sequence of (sphere, material) pairs.

        Each pair is ((center, radius), material). Pairs that pass the very
        same material object share one arena slot.

        Args:
            pairs: The (shape, material) pairs in insertion order.

        Returns:
            A new Scene.
        """
        scene = cls()
        ids: dict[int, int] = {}
        for (center, radius), material in pairs:
            material_id = ids.get(id(material))
            if material_id is None:
                material_id = scene.add_material(material)
                ids[id(material)] = material_id
            scene.add_sphere(center, radius, material_id)
        return scene

    def clear(self) -> None:
        """Remove all spheres and materials."""
        self.materials.clear()
        self.spheres.clear()

    # =========================================================================
    # Material Management
    # =========================================================================

    def add_material(self, material: Material) -> int:
        """Add a material value to the arena.

        Args:
            material: A Lambertian, Metal or Dielectric value.

        Returns:
            The material ID.

        Raises:
            RuntimeError: If the maximum number of materials is exceeded.
            TypeError: If the value is not a supported material.
        """
        material_type_of(material)
        if len(self.materials) >= MAX_MATERIALS:
            raise RuntimeError(f"Maximum number of materials ({MAX_MATERIALS}) exceeded")
        self.materials.append(material)
        return len(self.materials) - 1

    def add_lambertian_material(self, albedo: tuple[float, float, float]) -> int:
        """Add a Lambertian (diffuse) material.

        Raises:
            ValueError: If any albedo component is outside [0, 1].
        """
        return self.add_material(Lambertian(albedo=albedo))

    def add_metal_material(self, albedo: tuple[float, float, float], fuzz: float = 0.0) -> int:
        """Add a metal material. Fuzz is clamped into [0, 1].

        Raises:
            ValueError: If any albedo component is outside [0, 1].
        """
        return self.add_material(Metal(albedo=albedo, fuzz=fuzz))

    def add_dielectric_material(self, refraction_index: float = 1.5) -> int:
        """Add a dielectric (glass/water) material.

        Raises:
            ValueError: If refraction_index is not positive.
        """
        return self.add_material(Dielectric(refraction_index=refraction_index))

    def get_material_count(self) -> int:
        """Get the total number of materials in the scene."""
        return len(self.materials)

    def get_material(self, material_id: int) -> Material | None:
        """Get a material by ID, or None if not found."""
        if 0 <= material_id < len(self.materials):
            return self.materials[material_id]
        return None

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material_id: int,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere (must be positive).
            material_id: The material ID to assign to the sphere.

        Returns:
            The index of the added sphere.

        Raises:
            RuntimeError: If the maximum number of spheres is exceeded.
            ValueError: If radius is not positive or material_id is invalid.
        """
        if not radius > 0.0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        if material_id < 0 or material_id >= len(self.materials):
            raise ValueError(f"Invalid material_id: {material_id}")
        if len(self.spheres) >= MAX_SPHERES:
            raise RuntimeError(f"Maximum number of spheres ({MAX_SPHERES}) exceeded")

        self.spheres.append(
            SphereInfo(center=_as_point(center), radius=float(radius), material_id=material_id)
        )
        return len(self.spheres) - 1

    def add_lambertian_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
    ) -> tuple[int, int]:
        """Add a sphere with a new Lambertian material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_lambertian_material(albedo)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def add_metal_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        albedo: tuple[float, float, float],
        fuzz: float = 0.0,
    ) -> tuple[int, int]:
        """Add a sphere with a new metal material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_metal_material(albedo, fuzz)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def add_dielectric_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        refraction_index: float = 1.5,
    ) -> tuple[int, int]:
        """Add a sphere with a new dielectric material.

        Returns:
            Tuple of (sphere_index, material_id).
        """
        material_id = self.add_dielectric_material(refraction_index)
        sphere_index = self.add_sphere(center, radius, material_id)
        return sphere_index, material_id

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return len(self.spheres)

    # =========================================================================
    # Device Upload
    # =========================================================================

    def upload(self) -> None:
        """Copy materials and spheres into the Taichi fields used for rendering."""
        upload_materials(self.materials)
        upload_spheres([(s.center, s.radius, s.material_id) for s in self.spheres])

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object."""
        config = SceneConfig()

        for material in self.materials:
            mat_config: dict[str, Any] = {"type": material_type_of(material).name.lower()}
            if isinstance(material, (Lambertian, Metal)):
                mat_config["albedo"] = list(material.albedo)
            if isinstance(material, Metal):
                mat_config["fuzz"] = material.fuzz
            if isinstance(material, Dielectric):
                mat_config["refraction_index"] = material.refraction_index
            config.materials.append(mat_config)

        for sphere in self.spheres:
            config.spheres.append(
                {
                    "center": list(sphere.center),
                    "radius": sphere.radius,
                    "material_id": sphere.material_id,
                }
            )

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        # Materials first, spheres refer to them by id
        for mat_config in config.materials:
            mat_type = mat_config.get("type", "").lower()
            if mat_type == MaterialType.LAMBERTIAN.name.lower():
                self.add_lambertian_material(_as_point(mat_config.get("albedo", [0.5, 0.5, 0.5])))
            elif mat_type == MaterialType.METAL.name.lower():
                self.add_metal_material(
                    _as_point(mat_config.get("albedo", [0.8, 0.8, 0.8])),
                    mat_config.get("fuzz", 0.0),
                )
            elif mat_type == MaterialType.DIELECTRIC.name.lower():
                self.add_dielectric_material(mat_config.get("refraction_index", 1.5))
            else:
                raise ValueError(f"Unknown material type: {mat_type}")

        for sphere_config in config.spheres:
            self.add_sphere(
                _as_point(sphere_config.get("center", [0.0, 0.0, 0.0])),
                sphere_config.get("radius", 1.0),
                sphere_config.get("material_id", 0),
            )

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization)."""
        config = self.to_config()
        return {"materials": config.materials, "spheres": config.spheres}

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "Scene":
        """Build a scene from a dictionary with 'materials' and 'spheres' keys."""
        scene = cls()
        scene.from_config(
            SceneConfig(
                materials=data.get("materials", []),
                spheres=data.get("spheres", []),
            )
        )
        return scene
