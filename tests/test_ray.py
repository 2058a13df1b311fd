"""Unit tests for the ray module.

Tests cover:
- Ray dataclass and ray_at function
- Vector utility functions (dot, cross, normalize, length, reflect, refract)
- Schlick reflectance
- Random sampling functions for Monte Carlo
"""

import math

import pytest
import taichi as ti


def _vec_field():
    return ti.Vector.field(3, dtype=ti.f64, shape=())


class TestRayBasics:
    """Tests for Ray dataclass and basic operations."""

    def test_ray_at_origin(self):
        """Test ray_at returns origin when t=0."""
        from src.pathtracer.core.ray import Ray, ray_at, vec3

        result = _vec_field()

        @ti.kernel
        def test_kernel():
            ray = Ray(origin=vec3(1.0, 2.0, 3.0), direction=vec3(0.0, 0.0, -1.0))
            result[None] = ray_at(ray, 0.0)

        test_kernel()
        r = result[None]
        assert r[0] == pytest.approx(1.0)
        assert r[1] == pytest.approx(2.0)
        assert r[2] == pytest.approx(3.0)

    def test_ray_at_positive_t(self):
        """Test ray_at computes origin + t * direction."""
        from src.pathtracer.core.ray import make_ray, ray_at, vec3

        result = _vec_field()

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(1.0, 0.0, 0.0), vec3(0.0, 2.0, 0.0))
            result[None] = ray_at(ray, 2.5)

        test_kernel()
        r = result[None]
        assert r[0] == pytest.approx(1.0)
        assert r[1] == pytest.approx(5.0)
        assert r[2] == pytest.approx(0.0)

    def test_ray_direction_not_normalized(self):
        """Test make_ray keeps the direction length."""
        from src.pathtracer.core.ray import length, make_ray, vec3

        result = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            ray = make_ray(vec3(0.0, 0.0, 0.0), vec3(3.0, 4.0, 0.0))
            result[None] = length(ray.direction)

        test_kernel()
        assert result[None] == pytest.approx(5.0)


class TestVectorAlgebra:
    """Tests for vector utility functions."""

    def test_dot_and_cross(self):
        """Test dot and cross products of basis vectors."""
        from src.pathtracer.core.ray import cross, dot, vec3

        dot_result = ti.field(dtype=ti.f64, shape=())
        cross_result = _vec_field()

        @ti.kernel
        def test_kernel():
            dot_result[None] = dot(vec3(1.0, 2.0, 3.0), vec3(4.0, -5.0, 6.0))
            cross_result[None] = cross(vec3(1.0, 0.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        assert dot_result[None] == pytest.approx(12.0)
        c = cross_result[None]
        assert (c[0], c[1], c[2]) == pytest.approx((0.0, 0.0, 1.0))

    def test_length_squared(self):
        """Test length_squared of a 3-4-0 vector."""
        from src.pathtracer.core.ray import length_squared, vec3

        result = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            result[None] = length_squared(vec3(3.0, 4.0, 0.0))

        test_kernel()
        assert result[None] == pytest.approx(25.0)

    def test_normalize(self):
        """Test normalize divides by the length."""
        from src.pathtracer.core.ray import normalize, vec3

        result = _vec_field()

        @ti.kernel
        def test_kernel():
            result[None] = normalize(vec3(3.0, 4.0, 0.0))

        test_kernel()
        r = result[None]
        assert (r[0], r[1], r[2]) == pytest.approx((0.6, 0.8, 0.0))

    def test_normalize_is_idempotent(self):
        """Test normalizing a unit vector leaves it unchanged."""
        from src.pathtracer.core.ray import normalize, vec3

        once = _vec_field()
        twice = _vec_field()

        @ti.kernel
        def test_kernel():
            u = normalize(vec3(-2.0, 7.0, 1.5))
            once[None] = u
            twice[None] = normalize(u)

        test_kernel()
        a = once[None]
        b = twice[None]
        for i in range(3):
            assert b[i] == pytest.approx(a[i], abs=1e-12)

    def test_near_zero(self):
        """Test near_zero threshold of 1e-8 on every component."""
        from src.pathtracer.core.ray import near_zero, vec3

        results = ti.field(dtype=ti.i32, shape=3)

        @ti.kernel
        def test_kernel():
            results[0] = near_zero(vec3(1e-9, -1e-9, 0.0))
            results[1] = near_zero(vec3(1e-9, 1e-7, 0.0))
            results[2] = near_zero(vec3(0.0, 0.0, 0.0))

        test_kernel()
        assert results[0] == 1
        assert results[1] == 0
        assert results[2] == 1

    def test_reflect_flips_normal_component(self):
        """Test reflecting (1, -1, 0) about (0, 1, 0) gives (1, 1, 0)."""
        from src.pathtracer.core.ray import reflect, vec3

        result = _vec_field()

        @ti.kernel
        def test_kernel():
            result[None] = reflect(vec3(1.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0))

        test_kernel()
        r = result[None]
        assert (r[0], r[1], r[2]) == pytest.approx((1.0, 1.0, 0.0))

    def test_reflect_negates_dot_with_normal(self):
        """Test dot(reflect(v, n), n) == -dot(v, n) for a unit normal."""
        from src.pathtracer.core.ray import dot, normalize, reflect, vec3

        before = ti.field(dtype=ti.f64, shape=())
        after = ti.field(dtype=ti.f64, shape=())

        @ti.kernel
        def test_kernel():
            v = vec3(0.3, -2.0, 1.1)
            n = normalize(vec3(0.2, 1.0, -0.4))
            before[None] = dot(v, n)
            after[None] = dot(reflect(v, n), n)

        test_kernel()
        assert after[None] == pytest.approx(-before[None])

    def test_refract_straight_through(self):
        """Test refraction at normal incidence keeps the direction."""
        from src.pathtracer.core.ray import refract, vec3

        result = _vec_field()

        @ti.kernel
        def test_kernel():
            result[None] = refract(vec3(0.0, -1.0, 0.0), vec3(0.0, 1.0, 0.0), 1.0 / 1.5)

        test_kernel()
        r = result[None]
        assert (r[0], r[1], r[2]) == pytest.approx((0.0, -1.0, 0.0))

    def test_refract_obeys_snell(self):
        """Test sin(theta_t) == eta_ratio * sin(theta_i)."""
        from src.pathtracer.core.ray import normalize, refract, vec3

        result = _vec_field()
        ratio = 1.0 / 1.5

        @ti.kernel
        def test_kernel():
            incident = normalize(vec3(1.0, -1.0, 0.0))
            result[None] = refract(incident, vec3(0.0, 1.0, 0.0), ratio)

        test_kernel()
        r = result[None]
        sin_i = math.sqrt(0.5)
        assert r[0] == pytest.approx(ratio * sin_i)
        assert math.sqrt(r[0] ** 2 + r[1] ** 2 + r[2] ** 2) == pytest.approx(1.0)
        assert r[1] < 0.0

    def test_schlick_reflectance(self):
        """Test Schlick's approximation at normal and grazing incidence."""
        from src.pathtracer.core.ray import reflectance

        results = ti.field(dtype=ti.f64, shape=2)

        @ti.kernel
        def test_kernel():
            results[0] = reflectance(1.0, 1.5)
            results[1] = reflectance(0.0, 1.5)

        test_kernel()
        r0 = ((1.0 - 1.5) / (1.0 + 1.5)) ** 2
        assert results[0] == pytest.approx(r0)
        assert results[1] == pytest.approx(1.0)


class TestRandomSampling:
    """Tests for random sampling functions."""

    def test_random_double_in_unit_interval(self):
        """Test random_double stays in [0, 1) and has a sensible mean."""
        from src.pathtracer.core.rng import random_double, seed_streams

        n = 10000
        values = ti.field(dtype=ti.f64, shape=n)
        seed_streams(1, count=1)

        @ti.kernel
        def test_kernel():
            ti.loop_config(serialize=True)
            for i in range(n):
                values[i] = random_double(0)

        test_kernel()
        arr = values.to_numpy()
        assert arr.min() >= 0.0
        assert arr.max() < 1.0
        assert arr.mean() == pytest.approx(0.5, abs=0.02)

    def test_same_seed_same_sequence(self):
        """Test reseeding reproduces the exact same draws."""
        from src.pathtracer.core.rng import random_double, seed_streams

        n = 16
        values = ti.field(dtype=ti.f64, shape=n)

        @ti.kernel
        def test_kernel():
            ti.loop_config(serialize=True)
            for i in range(n):
                values[i] = random_double(3)

        seed_streams(99, count=4)
        test_kernel()
        first = values.to_numpy()

        seed_streams(99, count=4)
        test_kernel()
        second = values.to_numpy()

        assert (first == second).all()

    def test_streams_are_independent(self):
        """Test distinct streams produce distinct sequences."""
        from src.pathtracer.core.rng import derive_stream_states

        states = derive_stream_states(5, 64)
        assert len(set(states.tolist())) == 64
        assert (states != 0).all()

    def test_seed_streams_writes_derived_states(self):
        """Test seeding stores the SeedSequence-derived state per stream."""
        from src.pathtracer.core.rng import derive_stream_states, get_stream_state, seed_streams

        seed_streams(8, count=4)
        expected = derive_stream_states(8, 4).tolist()
        assert [get_stream_state(i) for i in range(4)] == expected

    def test_seed_streams_rejects_bad_count(self):
        """Test stream count bounds are validated."""
        from src.pathtracer.core.rng import MAX_STREAMS, seed_streams

        with pytest.raises(ValueError):
            seed_streams(0, count=0)
        with pytest.raises(ValueError):
            seed_streams(0, count=MAX_STREAMS + 1)

    def test_random_in_unit_sphere(self):
        """Test rejection-sampled points lie strictly inside the unit ball."""
        from src.pathtracer.core.ray import length_squared, random_in_unit_sphere
        from src.pathtracer.core.rng import seed_streams

        n = 2000
        lengths = ti.field(dtype=ti.f64, shape=n)
        seed_streams(2, count=1)

        @ti.kernel
        def test_kernel():
            ti.loop_config(serialize=True)
            for i in range(n):
                lengths[i] = length_squared(random_in_unit_sphere(0))

        test_kernel()
        assert lengths.to_numpy().max() < 1.0

    def test_random_unit_vector(self):
        """Test random_unit_vector has unit length."""
        from src.pathtracer.core.ray import length, random_unit_vector
        from src.pathtracer.core.rng import seed_streams

        n = 500
        lengths = ti.field(dtype=ti.f64, shape=n)
        seed_streams(3, count=1)

        @ti.kernel
        def test_kernel():
            ti.loop_config(serialize=True)
            for i in range(n):
                lengths[i] = length(random_unit_vector(0))

        test_kernel()
        assert lengths.to_numpy() == pytest.approx([1.0] * n)

    def test_random_in_hemisphere(self):
        """Test hemisphere samples never point against the normal."""
        from src.pathtracer.core.ray import dot, random_in_hemisphere, vec3
        from src.pathtracer.core.rng import seed_streams

        n = 1000
        dots = ti.field(dtype=ti.f64, shape=n)
        seed_streams(4, count=1)

        @ti.kernel
        def test_kernel():
            ti.loop_config(serialize=True)
            for i in range(n):
                normal = vec3(0.0, 0.0, 1.0)
                dots[i] = dot(random_in_hemisphere(0, normal), normal)

        test_kernel()
        assert dots.to_numpy().min() >= 0.0

    def test_random_in_unit_disk(self):
        """Test disk samples lie in the z=0 plane inside the unit circle."""
        from src.pathtracer.core.ray import random_in_unit_disk
        from src.pathtracer.core.rng import seed_streams

        n = 1000
        points = ti.Vector.field(3, dtype=ti.f64, shape=n)
        seed_streams(5, count=1)

        @ti.kernel
        def test_kernel():
            ti.loop_config(serialize=True)
            for i in range(n):
                points[i] = random_in_unit_disk(0)

        test_kernel()
        arr = points.to_numpy()
        assert (arr[:, 2] == 0.0).all()
        assert ((arr[:, 0] ** 2 + arr[:, 1] ** 2) < 1.0).all()
