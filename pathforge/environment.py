"""
Background radiance for rays that leave the scene.

Implements:
- Vertical gradient sky (default background)
- Solid color backgrounds
"""

from __future__ import annotations
from abc import ABC, abstractmethod

from .vec3 import Vec3, Color, lerp


class Environment(ABC):
    """Abstract base class for environment lighting."""

    @abstractmethod
    def sample(self, direction: Vec3) -> Color:
        """Get the environment color for a given direction.

        Args:
            direction: The direction to sample (need not be normalized)

        Returns:
            Color value from the environment
        """


class SolidColorEnvironment(Environment):
    """A uniform background color."""

    def __init__(self, color: Color = Color(0, 0, 0)):
        self.color = color

    def sample(self, direction: Vec3) -> Color:
        return self.color


class GradientEnvironment(Environment):
    """A vertical gradient environment (simple sky).

    Blends with t = 0.5 * (y + 1), y being the unit direction's height,
    so straight down gives the horizon color and straight up the zenith
    color. The variant t = 0.5 * y + 1 would extrapolate past the zenith
    color for every upward ray and is not used.
    """

    def __init__(
        self,
        horizon_color: Color = Color(1, 1, 1),
        zenith_color: Color = Color(0.5, 0.7, 1.0)
    ):
        """Create a gradient environment.

        Args:
            horizon_color: Color looking straight down (t = 0)
            zenith_color: Color looking straight up (t = 1)
        """
        self.horizon_color = horizon_color
        self.zenith_color = zenith_color

    def sample(self, direction: Vec3) -> Color:
        # Y-up: map unit y from [-1, 1] to [0, 1]
        t = 0.5 * (direction.normalize().y + 1.0)
        return lerp(self.horizon_color, self.zenith_color, t)
