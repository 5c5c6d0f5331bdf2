"""
Materials system.

Implements:
- Lambertian diffuse
- Metal (specular reflection with roughness)
- Dielectric (glass, water - with refraction)

Each material turns a hit into a ScatterResult: an attenuation color plus
the ray to follow next, or an absorbed sample.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
import math

import numpy as np

from .vec3 import Vec3, Color
from .ray import Ray
from .shapes import HitRecord


@dataclass
class ScatterResult:
    """Result of a material scatter operation."""
    absorbed: bool
    attenuation: Color
    scattered_ray: Ray


def schlick(cosine: float, eta: float) -> float:
    """Schlick's approximation of the Fresnel reflectance.

    Args:
        cosine: Cosine of the angle between ray and normal
        eta: Relative index of refraction

    Returns:
        Probability of reflection in [r0, 1]
    """
    r0 = (1 - eta) / (1 + eta)
    r0 = r0 * r0
    return r0 + (1 - r0) * pow(1 - cosine, 5)


def _check_color(name: str, color: Color) -> None:
    if not color.is_finite():
        raise ValueError(f"{name} must be finite, got {color}")


class Material(ABC):
    """Abstract base class for materials."""

    @abstractmethod
    def scatter(self, hit: HitRecord, rng: np.random.Generator) -> ScatterResult:
        """Compute the scattered ray and attenuation.

        Args:
            hit: The intersection being shaded
            rng: Random source for any stochastic choice

        Returns:
            ScatterResult, with ``absorbed`` set when the path ends here
        """


class Lambertian(Material):
    """Diffuse material with Lambertian (ideal matte) scattering."""

    def __init__(self, albedo: Color):
        """Create a Lambertian material.

        Args:
            albedo: The base color (RGB, each component 0-1)
        """
        _check_color("albedo", albedo)
        self.albedo = albedo

    def scatter(self, hit: HitRecord, rng: np.random.Generator) -> ScatterResult:
        # Offset by a point in the unit sphere tangent to the surface
        target = hit.point + hit.normal + Vec3.random_in_unit_sphere(rng)
        return ScatterResult(
            absorbed=False,
            attenuation=self.albedo,
            scattered_ray=Ray(hit.point, target - hit.point)
        )

    def __repr__(self) -> str:
        return f"Lambertian(albedo={self.albedo})"


class Metal(Material):
    """Metallic material with fuzzy specular reflection."""

    def __init__(self, albedo: Color, roughness: float = 1.0):
        """Create a metal material.

        Args:
            albedo: The reflection color
            roughness: Radius of the random perturbation added to the mirror
                direction (0 = perfect mirror). Not clamped.
        """
        _check_color("albedo", albedo)
        if not math.isfinite(roughness):
            raise ValueError(f"roughness must be finite, got {roughness}")
        self.albedo = albedo
        self.roughness = roughness

    def scatter(self, hit: HitRecord, rng: np.random.Generator) -> ScatterResult:
        reflected = hit.ray.direction.normalize().reflect(hit.normal)
        direction = reflected + Vec3.random_in_unit_sphere(rng) * self.roughness

        # Rays pushed below the surface are lost
        return ScatterResult(
            absorbed=direction.dot(hit.normal) <= 0,
            attenuation=self.albedo,
            scattered_ray=Ray(hit.point, direction)
        )

    def __repr__(self) -> str:
        return f"Metal(albedo={self.albedo}, roughness={self.roughness})"


class Dielectric(Material):
    """Dielectric (glass-like) material with refraction."""

    def __init__(self, albedo: Color = Color(1, 1, 1), ior: float = 1.0):
        """Create a dielectric material.

        Args:
            albedo: Color tint applied on every bounce
            ior: Index of refraction (1.0 = air, 1.5 = glass, 2.4 = diamond)
        """
        _check_color("albedo", albedo)
        if not (math.isfinite(ior) and ior > 0):
            raise ValueError(f"ior must be positive and finite, got {ior}")
        self.albedo = albedo
        self.ior = ior

    def scatter(self, hit: HitRecord, rng: np.random.Generator) -> ScatterResult:
        direction = hit.ray.direction
        d_dot_n = direction.dot(hit.normal)

        if d_dot_n > 0:
            # Leaving the medium
            normal = -hit.normal
            eta = self.ior
            cosine = self.ior * d_dot_n / direction.length()
        else:
            normal = hit.normal
            eta = 1.0 / self.ior
            cosine = -d_dot_n / direction.length()

        refracted = direction.refract(normal, eta)
        reflect_prob = schlick(cosine, eta) if refracted is not None else 1.0

        if rng.random() < reflect_prob:
            scattered = Ray(hit.point, direction.reflect(hit.normal))
        else:
            scattered = Ray(hit.point, refracted)

        return ScatterResult(
            absorbed=False,
            attenuation=self.albedo,
            scattered_ray=scattered
        )

    def __repr__(self) -> str:
        return f"Dielectric(albedo={self.albedo}, ior={self.ior})"
