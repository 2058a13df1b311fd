"""Unit tests for the Lambertian (diffuse) material.

Tests cover:
- Albedo validation on the host-side dataclass
- Scatter direction lies on the normal's side
- Attenuation equals the albedo
- Material arena dispatch for Lambertian hits
"""

import numpy as np
import pytest
import taichi as ti


class TestLambertianParameters:
    """Tests for the Lambertian dataclass."""

    def test_valid_albedo(self):
        """Test a valid albedo is stored as floats."""
        from src.pathtracer.materials.lambertian import Lambertian

        material = Lambertian(albedo=(1, 0.5, 0))
        assert material.albedo == (1.0, 0.5, 0.0)

    @pytest.mark.parametrize("albedo", [(1.2, 0.5, 0.5), (0.5, -0.1, 0.5), (0.5, 0.5)])
    def test_invalid_albedo(self, albedo):
        """Test out-of-range or malformed albedo raises ValueError."""
        from src.pathtracer.materials.lambertian import Lambertian

        with pytest.raises(ValueError):
            Lambertian(albedo=albedo)

    def test_is_immutable(self):
        """Test material values cannot be changed after construction."""
        from dataclasses import FrozenInstanceError

        from src.pathtracer.materials.lambertian import Lambertian

        material = Lambertian(albedo=(0.5, 0.5, 0.5))
        with pytest.raises(FrozenInstanceError):
            material.albedo = (0.1, 0.1, 0.1)


class TestLambertianScatter:
    """Tests for scatter_lambertian."""

    def test_always_scatters_with_albedo(self):
        """Test every sample scatters with the albedo as attenuation."""
        from src.pathtracer.core.ray import vec3
        from src.pathtracer.core.rng import seed_streams
        from src.pathtracer.materials.lambertian import scatter_lambertian

        n = 500
        scattered = ti.field(dtype=ti.i32, shape=n)
        attenuation = ti.Vector.field(3, dtype=ti.f64, shape=n)
        cos_theta = ti.field(dtype=ti.f64, shape=n)
        seed_streams(11, count=1)

        @ti.kernel
        def test_kernel():
            ti.loop_config(serialize=True)
            for i in range(n):
                normal = vec3(0.0, 1.0, 0.0)
                direction, atten, did_scatter = scatter_lambertian(vec3(0.8, 0.4, 0.2), normal, 0)
                scattered[i] = did_scatter
                attenuation[i] = atten
                cos_theta[i] = direction.normalized().dot(normal)

        test_kernel()
        assert (scattered.to_numpy() == 1).all()
        assert np.allclose(attenuation.to_numpy(), (0.8, 0.4, 0.2))
        # normal + unit vector never points below the surface
        assert cos_theta.to_numpy().min() >= -1e-9

    def test_cosine_weighted_distribution(self):
        """Test mean cos(theta) of scattered directions is about 2/3."""
        from src.pathtracer.core.ray import vec3
        from src.pathtracer.core.rng import seed_streams
        from src.pathtracer.materials.lambertian import scatter_lambertian

        n = 20000
        cos_theta = ti.field(dtype=ti.f64, shape=n)
        seed_streams(12, count=1)

        @ti.kernel
        def test_kernel():
            ti.loop_config(serialize=True)
            for i in range(n):
                normal = vec3(0.0, 0.0, 1.0)
                direction, _, _ = scatter_lambertian(vec3(0.5, 0.5, 0.5), normal, 0)
                cos_theta[i] = direction.normalized().dot(normal)

        test_kernel()
        assert cos_theta.to_numpy().mean() == pytest.approx(2.0 / 3.0, abs=0.02)


class TestLambertianDispatch:
    """Tests for material arena dispatch."""

    def test_scatter_dispatches_by_material_id(self):
        """Test scatter() uses the uploaded Lambertian albedo."""
        from src.pathtracer.core.ray import vec3
        from src.pathtracer.core.rng import seed_streams
        from src.pathtracer.geometry.sphere import HitRecord
        from src.pathtracer.materials.lambertian import Lambertian
        from src.pathtracer.materials.material import MaterialType, get_material_type, scatter, upload_materials

        upload_materials([Lambertian((0.1, 0.2, 0.3)), Lambertian((0.9, 0.8, 0.7))])
        seed_streams(13, count=1)

        mat_type = ti.field(dtype=ti.i32, shape=())
        did = ti.field(dtype=ti.i32, shape=())
        atten = ti.Vector.field(3, dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            rec = HitRecord(
                hit=1,
                t=1.0,
                point=vec3(0.0, 0.0, 0.0),
                normal=vec3(0.0, 1.0, 0.0),
                front_face=1,
                material_id=1,
            )
            mat_type[None] = get_material_type(1)
            _, a, d = scatter(vec3(0.0, -1.0, 0.0), rec, 0)
            atten[None] = a
            did[None] = d

        test_kernel()
        assert mat_type[None] == int(MaterialType.LAMBERTIAN)
        assert did[None] == 1
        assert tuple(atten[None]) == pytest.approx((0.9, 0.8, 0.7))

    def test_invalid_material_id_absorbs(self):
        """Test an id outside the arena yields no scatter."""
        from src.pathtracer.core.ray import vec3
        from src.pathtracer.core.rng import seed_streams
        from src.pathtracer.geometry.sphere import HitRecord
        from src.pathtracer.materials.material import get_material_type, scatter

        seed_streams(14, count=1)
        mat_type = ti.field(dtype=ti.i32, shape=())
        did = ti.field(dtype=ti.i32, shape=())

        @ti.kernel
        def test_kernel():
            rec = HitRecord(
                hit=1,
                t=1.0,
                point=vec3(0.0, 0.0, 0.0),
                normal=vec3(0.0, 1.0, 0.0),
                front_face=1,
                material_id=5,
            )
            mat_type[None] = get_material_type(5)
            _, _, d = scatter(vec3(0.0, -1.0, 0.0), rec, 0)
            did[None] = d

        test_kernel()
        assert mat_type[None] == -1
        assert did[None] == 0
