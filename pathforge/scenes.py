"""
Built-in scenes.

Each builder returns the world together with a camera that frames it.
"""

from __future__ import annotations
from typing import Tuple

import numpy as np

from .vec3 import Vec3, Point3, Color
from .camera import Camera
from .shapes import Sphere, HittableList
from .materials import Lambertian, Metal, Dielectric


def random_scene(rng: np.random.Generator) -> HittableList:
    """A large ground sphere under a grid of small random spheres.

    Small spheres are diffuse 80% of the time, metal 15% and glass 5%.
    Three large feature spheres (glass, diffuse, mirror) sit in the middle.
    """
    world = HittableList()
    world.add(Sphere(Point3(0, -1000, 0), 1000, Lambertian(Color(0.5, 0.5, 0.5))))

    clearing = Point3(4, 0.2, 0)
    for a in range(-11, 11):
        for b in range(-11, 11):
            choose_mat = rng.random()
            center = Point3(a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random())
            if (center - clearing).length() <= 0.9:
                continue

            if choose_mat < 0.8:
                material = Lambertian(Color.random(rng))
            elif choose_mat < 0.95:
                material = Metal(Color.random(rng), 0.5 * rng.random())
            else:
                material = Dielectric(Color(1, 1, 1), 1.5)
            world.add(Sphere(center, 0.2, material))

    world.add(Sphere(Point3(0, 1, 0), 1.0, Dielectric(Color(1, 1, 1), 1.5)))
    world.add(Sphere(Point3(-4, 1, 0), 1.0, Lambertian(Color(0.4, 0.2, 0.1))))
    world.add(Sphere(Point3(4, 1, 0), 1.0, Metal(Color(0.7, 0.6, 0.5), 0.0)))

    return world


def random_scene_camera(aspect_ratio: float = 16.0 / 9.0) -> Camera:
    """Camera looking at the feature spheres of `random_scene`."""
    return Camera(
        look_from=Point3(13, 2, 3),
        look_at=Point3(0, 0, 0),
        vup=Vec3(0, 1, 0),
        vfov=20,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_dist=10.0
    )


def simple_scene() -> HittableList:
    """Three spheres of each material on a diffuse ground."""
    world = HittableList()
    world.add(Sphere(Point3(0, -100.5, -1), 100, Lambertian(Color(0.8, 0.8, 0.0))))
    world.add(Sphere(Point3(0, 0, -1), 0.5, Lambertian(Color(0.1, 0.2, 0.5))))
    world.add(Sphere(Point3(1, 0, -1), 0.5, Metal(Color(0.8, 0.6, 0.2), 0.3)))
    world.add(Sphere(Point3(-1, 0, -1), 0.5, Dielectric(Color(1, 1, 1), 1.5)))
    return world


def simple_scene_camera(aspect_ratio: float = 16.0 / 9.0) -> Camera:
    """Camera framing `simple_scene` from slightly above."""
    return Camera(
        look_from=Point3(0, 0.5, 2),
        look_at=Point3(0, 0, -1),
        vup=Vec3(0, 1, 0),
        vfov=50,
        aspect_ratio=aspect_ratio,
        aperture=0.0,
        focus_dist=3.0
    )


def build_scene(name: str, rng: np.random.Generator, aspect_ratio: float) -> Tuple[HittableList, Camera]:
    """Build a named scene and its camera.

    Raises:
        ValueError: If the name is not a built-in scene
    """
    if name == 'random':
        return random_scene(rng), random_scene_camera(aspect_ratio)
    elif name == 'simple':
        return simple_scene(), simple_scene_camera(aspect_ratio)
    raise ValueError(f"Unknown scene: {name}")


SCENE_NAMES = ('random', 'simple')
