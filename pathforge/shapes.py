"""
Geometric shapes for the path tracer.

Each shape implements the Hittable interface with a `hit` method. The scene
is a flat HittableList that is scanned linearly for the nearest hit.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Iterable, Optional, TYPE_CHECKING
import math

from .vec3 import Vec3, Point3
from .ray import Ray

if TYPE_CHECKING:
    from .materials import Material


@dataclass
class HitRecord:
    """Stores information about a ray-object intersection.

    Attributes:
        ray: The incoming ray
        t: The ray parameter at intersection
        point: The intersection point in world space
        normal: Unit surface normal pointing out of the object
        material: The material at the hit point
    """
    ray: Ray
    t: float
    point: Point3
    normal: Vec3
    material: Material


class Hittable(ABC):
    """Abstract base class for all objects that can be hit by rays."""

    @abstractmethod
    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test if ray intersects this object.

        Args:
            ray: The ray to test
            t_min: Lower bound (exclusive) of accepted t values
            t_max: Upper bound (exclusive) of accepted t values

        Returns:
            HitRecord if intersection found, None otherwise
        """


class Sphere(Hittable):
    """A sphere defined by center and radius."""

    def __init__(self, center: Point3, radius: float, material: Material):
        """Create a sphere.

        Raises:
            ValueError: If the radius is not a positive finite number or the
                center is not finite
        """
        if not (math.isfinite(radius) and radius > 0):
            raise ValueError(f"Sphere radius must be positive and finite, got {radius}")
        if not center.is_finite():
            raise ValueError(f"Sphere center must be finite, got {center}")
        self.center = center
        self.radius = radius
        self.material = material

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test ray-sphere intersection using the quadratic formula.

        The equation (P-C)·(P-C) = r² where P = ray.at(t)
        expands to: t²(d·d) + 2t(d·(O-C)) + (O-C)·(O-C) - r² = 0
        which is the quadratic at² + bt + c = 0.
        """
        oc = ray.origin - self.center
        a = ray.direction.length_squared()
        b = 2.0 * oc.dot(ray.direction)
        c = oc.length_squared() - self.radius * self.radius

        discriminant = b * b - 4.0 * a * c
        if discriminant < 0 or a == 0:
            return None

        sqrtd = math.sqrt(discriminant)

        # Nearest root strictly inside the interval, else the far one
        root = (-b - sqrtd) / (2.0 * a)
        if not t_min < root < t_max:
            root = (-b + sqrtd) / (2.0 * a)
            if not t_min < root < t_max:
                return None

        point = ray.at(root)
        return HitRecord(
            ray=ray,
            t=root,
            point=point,
            normal=(point - self.center).normalize(),
            material=self.material
        )

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


class HittableList(Hittable):
    """An ordered collection of hittable objects."""

    def __init__(self, objects: Optional[Iterable[Hittable]] = None):
        self.objects: list[Hittable] = list(objects) if objects is not None else []

    def add(self, obj: Hittable) -> None:
        """Add an object to the list."""
        self.objects.append(obj)

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Find the closest intersection among all objects.

        Ties keep the object that appears first.
        """
        closest_hit: Optional[HitRecord] = None

        for obj in self.objects:
            hit_record = obj.hit(ray, t_min, t_max)
            if hit_record is not None and (closest_hit is None or hit_record.t < closest_hit.t):
                closest_hit = hit_record

        return closest_hit

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self):
        return iter(self.objects)
