"""
Camera module for generating primary rays.

Supports:
- Perspective projection with a vertical field of view
- Depth of field (thin lens defocus blur)
- Arbitrary positioning via look-at
"""

from __future__ import annotations
import math

import numpy as np

from .vec3 import Vec3, Point3
from .ray import Ray


class Camera:
    """A thin-lens perspective camera. Immutable after construction."""

    def __init__(
        self,
        look_from: Point3,
        look_at: Point3,
        vup: Vec3 = Vec3(0, 1, 0),
        vfov: float = 90.0,
        aspect_ratio: float = 16.0 / 9.0,
        aperture: float = 0.0,
        focus_dist: float = 1.0
    ):
        """Create a camera.

        Args:
            look_from: Camera position in world space
            look_at: Point the camera is looking at
            vup: World up vector (usually (0, 1, 0))
            vfov: Vertical field of view in degrees
            aspect_ratio: Width / Height ratio
            aperture: Lens diameter for depth of field (0 = pinhole)
            focus_dist: Distance to the plane in perfect focus

        Raises:
            ValueError: If the parameters describe a degenerate camera
        """
        for name, value in (('vfov', vfov), ('aspect_ratio', aspect_ratio),
                            ('aperture', aperture), ('focus_dist', focus_dist)):
            if not math.isfinite(value):
                raise ValueError(f"Camera {name} must be finite, got {value}")
        if not (look_from.is_finite() and look_at.is_finite() and vup.is_finite()):
            raise ValueError("Camera vectors must be finite")
        if not 0 < vfov < 180:
            raise ValueError(f"vfov must be in (0, 180) degrees, got {vfov}")
        if aspect_ratio <= 0:
            raise ValueError(f"aspect_ratio must be positive, got {aspect_ratio}")
        if aperture < 0:
            raise ValueError(f"aperture must be non-negative, got {aperture}")
        if focus_dist <= 0:
            raise ValueError(f"focus_dist must be positive, got {focus_dist}")

        view = look_from - look_at
        if view.near_zero():
            raise ValueError("look_from and look_at must be distinct points")

        half_height = math.tan(vfov * math.pi / 360.0)
        half_width = aspect_ratio * half_height

        # Orthonormal camera basis
        self.w = view.normalize()           # Points backward from camera
        right = vup.cross(self.w)
        if right.length_squared() < 1e-12:
            raise ValueError("vup must not be parallel to the view direction")
        self.u = right.normalize()          # Points right
        self.v = self.w.cross(self.u)       # Points up

        self.origin = look_from
        self.horizontal = self.u * (2.0 * half_width * focus_dist)
        self.vertical = self.v * (2.0 * half_height * focus_dist)
        self.lower_left_corner = (
            self.origin
            - self.u * (half_width * focus_dist)
            - self.v * (half_height * focus_dist)
            - self.w * focus_dist
        )

        self.lens_radius = aperture / 2

    def get_ray(self, s: float, t: float, rng: np.random.Generator) -> Ray:
        """Generate a ray for the given coordinates on the image plane.

        Args:
            s: Horizontal coordinate [0, 1] (0 = left, 1 = right)
            t: Vertical coordinate [0, 1] (0 = bottom, 1 = top)
            rng: Random source for the lens sample

        Returns:
            A ray from a point on the lens through the focus plane
        """
        if self.lens_radius > 0:
            rd = Vec3.random_in_unit_disk(rng) * self.lens_radius
            offset = self.u * rd.x + self.v * rd.y
        else:
            offset = Vec3(0, 0, 0)

        direction = (
            self.lower_left_corner
            + self.horizontal * s
            + self.vertical * t
            - self.origin
            - offset
        )
        return Ray(self.origin + offset, direction)

    def __repr__(self) -> str:
        return f"Camera(origin={self.origin}, looking_at={self.lower_left_corner + self.horizontal/2 + self.vertical/2})"
