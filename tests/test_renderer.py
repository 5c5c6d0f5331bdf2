"""Tests for the radiance estimator and the Renderer class."""

import pytest
import numpy as np

from pathforge.vec3 import Vec3, Point3, Color
from pathforge.ray import Ray
from pathforge.camera import Camera
from pathforge.shapes import Sphere, HittableList
from pathforge.materials import Material, ScatterResult, Lambertian, Metal, Dielectric
from pathforge.environment import GradientEnvironment, SolidColorEnvironment
from pathforge.renderer import Renderer, RenderSettings, ray_color, MAX_DEPTH

BLACK = Color(0, 0, 0)


class Absorber(Material):
    """Material that ends every path."""

    def scatter(self, hit, rng):
        return ScatterResult(absorbed=True, attenuation=Color(1, 1, 1), scattered_ray=hit.ray)


def forward_camera(aspect_ratio=1.0):
    return Camera(
        look_from=Point3(0, 0, 0),
        look_at=Point3(0, 0, -1),
        vup=Vec3(0, 1, 0),
        vfov=90,
        aspect_ratio=aspect_ratio
    )


def small_scene():
    world = HittableList()
    world.add(Sphere(Point3(0, -100.5, -1), 100, Lambertian(Color(0.8, 0.8, 0.0))))
    world.add(Sphere(Point3(0, 0, -1), 0.5, Lambertian(Color(0.1, 0.2, 0.5))))
    world.add(Sphere(Point3(1, 0, -1), 0.5, Metal(Color(0.8, 0.6, 0.2), 0.3)))
    world.add(Sphere(Point3(-1, 0, -1), 0.5, Dielectric(Color(1, 1, 1), 1.5)))
    return world


def settings(**kwargs):
    params = dict(width=4, height=3, samples_per_pixel=2, num_threads=1, seed=42)
    params.update(kwargs)
    return RenderSettings(**params)


class TestRayColorBackground:
    """Rays that hit nothing see the sky."""

    def test_straight_up_is_sky_blue(self):
        ray = Ray(Point3(0, 0, 0), Vec3(0, 1, 0))
        color = ray_color(ray, HittableList(), np.random.default_rng(0))
        assert tuple(color) == (0.5, 0.7, 1.0)

    def test_straight_down_is_white(self):
        ray = Ray(Point3(0, 0, 0), Vec3(0, -3, 0))
        color = ray_color(ray, HittableList(), np.random.default_rng(0))
        assert color == Color(1, 1, 1)

    def test_horizon_is_halfway(self):
        ray = Ray(Point3(0, 0, 0), Vec3(1, 0, 0))
        color = ray_color(ray, HittableList(), np.random.default_rng(0))
        assert color == Color(0.75, 0.85, 1.0)

    def test_custom_environment(self):
        ray = Ray(Point3(0, 0, 0), Vec3(0, 1, 0))
        env = SolidColorEnvironment(Color(0.1, 0.2, 0.3))
        color = ray_color(ray, HittableList(), np.random.default_rng(0), environment=env)
        assert color == Color(0.1, 0.2, 0.3)

    def test_miss_at_depth_limit_still_sees_sky(self):
        ray = Ray(Point3(0, 0, 0), Vec3(0, 1, 0))
        color = ray_color(ray, HittableList(), np.random.default_rng(0), depth=MAX_DEPTH)
        assert color == Color(0.5, 0.7, 1.0)


class TestRayColorTermination:
    """Absorption and the depth cap end paths in black."""

    @pytest.mark.parametrize("material", [
        Lambertian(Color(0.9, 0.9, 0.9)),
        Metal(Color(0.9, 0.9, 0.9), 0.0),
        Dielectric(Color(1, 1, 1), 1.5),
    ])
    def test_depth_limit_returns_black(self, material):
        world = HittableList([Sphere(Point3(0, 0, -5), 1.0, material)])
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        rng = np.random.default_rng(0)
        assert ray_color(ray, world, rng, depth=MAX_DEPTH) == BLACK
        assert ray_color(ray, world, rng, depth=MAX_DEPTH + 10) == BLACK

    def test_one_bounce_below_limit_reaches_sky(self):
        world = HittableList([Sphere(Point3(0, 0, -5), 1.0, Lambertian(Color(0.5, 0.5, 0.5)))])
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        color = ray_color(ray, world, np.random.default_rng(0), depth=MAX_DEPTH - 1)
        assert color.r > 0
        assert color.b == pytest.approx(0.5)

    def test_custom_max_depth(self):
        world = HittableList([Sphere(Point3(0, 0, -5), 1.0, Lambertian(Color(0.5, 0.5, 0.5)))])
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        assert ray_color(ray, world, np.random.default_rng(0), max_depth=0) == BLACK

    def test_absorbed_returns_black(self):
        world = HittableList([Sphere(Point3(0, 0, -5), 1.0, Absorber())])
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        assert ray_color(ray, world, np.random.default_rng(0)) == BLACK

    def test_attenuation_multiplies(self):
        # A matched-index dielectric passes rays straight through
        world = HittableList([Sphere(Point3(0, 5, 0), 1.0, Dielectric(Color(0.5, 0.8, 1.0), 1.0))])
        ray = Ray(Point3(0, 0, 0), Vec3(0, 1, 0))
        color = ray_color(ray, world, np.random.default_rng(0))
        # Two surfaces, two attenuations, then the zenith
        assert color == Color(0.5 * 0.5 * 0.5, 0.8 * 0.8 * 0.7, 1.0)


class TestRayColorConvergence:
    """Statistical regression for a diffuse sphere lit by the sky."""

    # For directions n + (point in unit ball), E[cos theta] = 4/5, so the
    # mean sky parameter is 0.9 and the mean sky color (0.55, 0.73, 1.0).
    EXPECTED_SKY = np.array([0.55, 0.73, 1.0])

    def test_top_of_sphere(self):
        albedo = Color(0.5, 0.5, 0.5)
        world = HittableList([Sphere(Point3(0, 0, 0), 1.0, Lambertian(albedo))])
        ray = Ray(Point3(0, 10, 0), Vec3(0, -1, 0))
        rng = np.random.default_rng(1234)

        n = 2000
        total = np.zeros(3)
        for _ in range(n):
            total += ray_color(ray, world, rng).to_array()
        mean = total / n

        expected = albedo.to_array() * self.EXPECTED_SKY
        assert mean == pytest.approx(expected, abs=0.01)

    def test_camera_looking_down(self):
        albedo = Color(0.6, 0.4, 0.2)
        world = HittableList([Sphere(Point3(0, 0, 0), 1.0, Lambertian(albedo))])
        camera = Camera(
            look_from=Point3(0, 10, 0),
            look_at=Point3(0, 0, 0),
            vup=Vec3(0, 0, -1),
            vfov=1.0,
            aspect_ratio=1.0
        )
        renderer = Renderer(settings(width=1, height=1, samples_per_pixel=600, seed=99))
        image = renderer.render(world, camera)

        expected = albedo.to_array() * self.EXPECTED_SKY
        assert image[0, 0] == pytest.approx(expected, abs=0.01)


class TestRenderSettings:
    """Test RenderSettings configuration."""

    def test_default_values(self):
        s = RenderSettings()
        assert s.width == 800
        assert s.height == 600
        assert s.samples_per_pixel == 100
        assert s.max_depth == 50
        assert s.seed is None
        assert isinstance(s.environment, GradientEnvironment)

    def test_auto_thread_detection(self):
        import os
        assert RenderSettings(num_threads=0).num_threads == (os.cpu_count() or 4)

    @pytest.mark.parametrize("kwargs", [
        {'width': 0},
        {'height': -1},
        {'samples_per_pixel': 0},
        {'max_depth': -1},
        {'tile_size': 0},
        {'seed': -3},
    ])
    def test_invalid_values(self, kwargs):
        with pytest.raises(ValueError):
            RenderSettings(**kwargs)


class TestRendererBasic:
    """Test basic renderer functionality."""

    def test_render_produces_image(self):
        renderer = Renderer(settings(width=10, height=6))
        image = renderer.render(small_scene(), forward_camera(10 / 6))

        assert image.shape == (6, 10, 3)
        assert image.dtype == np.float64
        assert np.all(image >= 0)

    def test_top_row_first(self):
        renderer = Renderer(settings(width=4, height=4, samples_per_pixel=1))
        image = renderer.render(HittableList(), forward_camera())

        # Upward rays are bluer, so they carry less red
        assert image[0, :, 0].mean() < image[-1, :, 0].mean()

    def test_solid_background(self):
        renderer = Renderer(settings(environment=SolidColorEnvironment(Color(0.1, 0.2, 0.3))))
        image = renderer.render(HittableList(), forward_camera())
        assert np.allclose(image, [0.1, 0.2, 0.3])

    def test_to_ldr(self):
        renderer = Renderer(settings())
        ldr = renderer.to_ldr(np.array([[[1.0, 0.25, 0.0]]]))
        assert ldr.dtype == np.uint8
        assert ldr.tolist() == [[[255, 127, 0]]]

    def test_save_image(self, tmp_path):
        renderer = Renderer(settings())
        path = tmp_path / "out.ppm"
        renderer.save_image(np.full((1, 2, 3), 0.25), path)
        assert path.read_bytes() == b"P3\n2 1\n255\n127 127 127\n127 127 127\n"


class TestRendererDeterminism:
    """Fixed seeds reproduce images exactly."""

    def test_same_seed_same_image(self):
        a = Renderer(settings(seed=7)).render(small_scene(), forward_camera(4 / 3))
        b = Renderer(settings(seed=7)).render(small_scene(), forward_camera(4 / 3))
        assert np.array_equal(a, b)

    def test_single_pixel_reproducible(self):
        camera = forward_camera()
        a = Renderer(settings(width=1, height=1, seed=3)).render(small_scene(), camera)
        b = Renderer(settings(width=1, height=1, seed=3)).render(small_scene(), camera)
        assert np.array_equal(a, b)

    def test_different_seed_different_image(self):
        a = Renderer(settings(seed=1)).render(small_scene(), forward_camera(4 / 3))
        b = Renderer(settings(seed=2)).render(small_scene(), forward_camera(4 / 3))
        assert not np.array_equal(a, b)

    def test_thread_count_does_not_change_image(self):
        sequential = Renderer(settings(tile_size=2, num_threads=1))
        threaded = Renderer(settings(tile_size=2, num_threads=4))
        a = sequential.render(small_scene(), forward_camera(4 / 3))
        b = threaded.render(small_scene(), forward_camera(4 / 3))
        assert np.array_equal(a, b)


class TestRendererTiles:
    """Test tile generation and progress reporting."""

    def test_tiles_cover_image(self):
        renderer = Renderer(settings(width=10, height=7, tile_size=4))
        tiles = renderer._generate_tiles(10, 7)
        covered = np.zeros((7, 10), dtype=int)
        for x0, y0, x1, y1 in tiles:
            covered[y0:y1, x0:x1] += 1
        assert np.all(covered == 1)

    def test_progress_callback(self):
        renderer = Renderer(settings(width=10, height=10, samples_per_pixel=1, tile_size=5))
        progress_values = []
        renderer.set_progress_callback(progress_values.append)

        renderer.render(HittableList(), forward_camera())

        assert len(progress_values) == 4
        assert progress_values[-1] == 1.0
