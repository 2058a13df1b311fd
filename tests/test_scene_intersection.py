"""Unit tests for scene-level intersection.

Tests cover:
- Sphere upload and counts
- Single sphere intersection
- Multiple spheres with closest hit selection
- Scene clearing
"""

import pytest
import taichi as ti


def _intersect(origin, direction, t_min=0.001, t_max=1e30):
    """Run intersect_scene in a kernel and return (hit, t, material_id)."""
    from src.pathtracer.core.ray import Ray, vec3
    from src.pathtracer.scene.intersection import intersect_scene

    hit = ti.field(dtype=ti.i32, shape=())
    t_val = ti.field(dtype=ti.f64, shape=())
    material_id = ti.field(dtype=ti.i32, shape=())

    @ti.kernel
    def test_kernel(o: vec3, d: vec3, lo: ti.f64, hi: ti.f64):
        rec = intersect_scene(Ray(origin=o, direction=d), lo, hi)
        hit[None] = rec.hit
        t_val[None] = rec.t
        material_id[None] = rec.material_id

    test_kernel(vec3(*origin), vec3(*direction), t_min, t_max)
    return hit[None], t_val[None], material_id[None]


class TestSceneSphereStorage:
    """Tests for scene sphere storage and management."""

    def test_upload_spheres(self):
        """Test uploading spheres sets the count."""
        from src.pathtracer.scene.intersection import get_sphere_count, upload_spheres

        assert get_sphere_count() == 0
        upload_spheres([((1.0, 2.0, 3.0), 0.5, 1), ((0.0, 0.0, 0.0), 2.0, 0)])
        assert get_sphere_count() == 2

    def test_clear_scene(self):
        """Test clearing all spheres from the scene."""
        from src.pathtracer.scene.intersection import clear_scene, get_sphere_count, upload_spheres

        upload_spheres([((0.0, 0.0, 0.0), 1.0, 0)])
        clear_scene()
        assert get_sphere_count() == 0

    def test_upload_over_capacity(self):
        """Test uploading more than MAX_SPHERES raises RuntimeError."""
        from src.pathtracer.scene.intersection import MAX_SPHERES, upload_spheres

        rows = [((0.0, 0.0, float(i)), 0.1, 0) for i in range(MAX_SPHERES + 1)]
        with pytest.raises(RuntimeError):
            upload_spheres(rows)


class TestSceneIntersection:
    """Tests for nearest-hit queries over the stored spheres."""

    def test_empty_scene_misses(self):
        """Test any ray misses an empty scene."""
        hit, _, _ = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 0

    def test_single_sphere_hit(self):
        """Test hitting the only sphere reports its material."""
        from src.pathtracer.scene.intersection import upload_spheres

        upload_spheres([((0.0, 0.0, -1.0), 0.5, 3)])
        hit, t, material_id = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert hit == 1
        assert t == pytest.approx(0.5)
        assert material_id == 3

    def test_closest_hit_wins_regardless_of_order(self):
        """Test the nearest sphere is reported even when stored last."""
        from src.pathtracer.scene.intersection import upload_spheres

        upload_spheres(
            [
                ((0.0, 0.0, -10.0), 1.0, 0),
                ((0.0, 0.0, -5.0), 1.0, 1),
                ((0.0, 0.0, -2.0), 0.5, 2),
            ]
        )
        hit, t, material_id = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))

        assert hit == 1
        assert t == pytest.approx(1.5)
        assert material_id == 2

    def test_t_max_limits_search(self):
        """Test spheres beyond t_max are ignored."""
        from src.pathtracer.scene.intersection import upload_spheres

        upload_spheres([((0.0, 0.0, -5.0), 1.0, 0)])
        hit, _, _ = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), t_max=3.0)
        assert hit == 0

    def test_t_min_skips_self_intersection(self):
        """Test a ray leaving a surface does not re-hit it at t ~ 0."""
        from src.pathtracer.scene.intersection import upload_spheres

        upload_spheres([((0.0, 0.0, 0.0), 1.0, 0)])
        # Origin on the surface, pointing outward
        hit, _, _ = _intersect((0.0, 0.0, 1.0), (0.0, 0.0, 1.0))
        assert hit == 0

    def test_miss_between_spheres(self):
        """Test a ray passing between two spheres misses both."""
        from src.pathtracer.scene.intersection import upload_spheres

        upload_spheres([((-2.0, 0.0, -5.0), 1.0, 0), ((2.0, 0.0, -5.0), 1.0, 1)])
        hit, _, _ = _intersect((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert hit == 0
