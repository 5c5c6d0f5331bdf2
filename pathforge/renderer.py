"""
Renderer module - the heart of the path tracer.

Implements:
- The recursive radiance estimator (`ray_color`)
- The pixel driver: jittered samples per pixel, tile-based work split
- Reproducible randomness: one independent generator per tile
"""

from __future__ import annotations
import logging
import os
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Callable, Tuple, Union
import numpy as np

from .vec3 import Color
from .ray import Ray
from .camera import Camera
from .shapes import Hittable
from .environment import Environment, GradientEnvironment
from .tonemapping import to_ldr
from . import image_io

logger = logging.getLogger(__name__)

# Offset that keeps scattered rays from re-hitting their own surface
T_MIN = 0.001
MAX_DEPTH = 50

BLACK = Color(0, 0, 0)
DEFAULT_ENVIRONMENT = GradientEnvironment()

Tile = Tuple[int, int, int, int]


def ray_color(
    ray: Ray,
    world: Hittable,
    rng: np.random.Generator,
    depth: int = 0,
    max_depth: int = MAX_DEPTH,
    environment: Environment = DEFAULT_ENVIRONMENT
) -> Color:
    """Estimate the radiance carried back along a ray.

    Args:
        ray: The ray to trace
        world: The scene to trace against
        rng: Random source for material sampling
        depth: Number of bounces already taken
        max_depth: Bounce count at which paths that hit something turn black
        environment: Background seen by rays that escape the scene

    Returns:
        The radiance estimate for this ray
    """
    hit = world.hit(ray, T_MIN, float('inf'))
    if hit is None:
        return environment.sample(ray.direction)

    result = hit.material.scatter(hit, rng)
    if result.absorbed or depth >= max_depth:
        return BLACK

    return result.attenuation.hadamard(
        ray_color(result.scattered_ray, world, rng, depth + 1, max_depth, environment)
    )


@dataclass
class RenderSettings:
    """Configuration for the renderer."""
    width: int = 800
    height: int = 600
    samples_per_pixel: int = 100
    max_depth: int = MAX_DEPTH
    tile_size: int = 32
    num_threads: int = 0  # 0 = auto-detect
    seed: Optional[int] = None  # None = fresh entropy every run
    environment: Optional[Environment] = None

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")
        if self.samples_per_pixel <= 0:
            raise ValueError(f"samples_per_pixel must be positive, got {self.samples_per_pixel}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be non-negative, got {self.max_depth}")
        if self.tile_size <= 0:
            raise ValueError(f"tile_size must be positive, got {self.tile_size}")
        if self.seed is not None and self.seed < 0:
            raise ValueError(f"seed must be non-negative, got {self.seed}")
        if self.environment is None:
            self.environment = DEFAULT_ENVIRONMENT
        if self.num_threads == 0:
            self.num_threads = os.cpu_count() or 4


class Renderer:
    """Path tracing renderer with optional multi-threading."""

    def __init__(self, settings: RenderSettings = None):
        """Create a renderer with the given settings.

        Args:
            settings: Render configuration (uses defaults if None)
        """
        self.settings = settings if settings else RenderSettings()
        self._progress_callback: Optional[Callable[[float], None]] = None

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0)
        """
        self._progress_callback = callback

    def render(self, scene: Hittable, camera: Camera) -> np.ndarray:
        """Render the scene and return the linear image as a numpy array.

        Row 0 of the result is the top of the picture. For a fixed
        ``settings.seed`` the output does not depend on the thread count.

        Args:
            scene: The scene to render (any Hittable)
            camera: The camera to render from

        Returns:
            HDR image as numpy array of shape (height, width, 3)
        """
        width = self.settings.width
        height = self.settings.height

        image = np.zeros((height, width, 3), dtype=np.float64)

        tiles = self._generate_tiles(width, height)
        seeds = np.random.SeedSequence(self.settings.seed).spawn(len(tiles))
        total_tiles = len(tiles)
        completed_tiles = [0]

        logger.info(
            "Rendering %dx%d at %d spp (%d tiles, %d threads)",
            width, height, self.settings.samples_per_pixel,
            total_tiles, self.settings.num_threads
        )

        def render_tile(job: Tuple[Tile, np.random.SeedSequence]) -> Tuple[Tile, np.ndarray]:
            tile, seed = job
            tile_image = self._render_tile(tile, scene, camera, np.random.default_rng(seed))

            completed_tiles[0] += 1
            if self._progress_callback:
                self._progress_callback(completed_tiles[0] / total_tiles)

            return tile, tile_image

        jobs = list(zip(tiles, seeds))
        if self.settings.num_threads > 1:
            with ThreadPoolExecutor(max_workers=self.settings.num_threads) as executor:
                results = list(executor.map(render_tile, jobs))
        else:
            results = [render_tile(job) for job in jobs]

        # Tiles cover disjoint regions of the image
        for (x0, y0, x1, y1), tile_image in results:
            image[y0:y1, x0:x1] = tile_image

        logger.info("Render finished")
        return image

    def _render_tile(
        self,
        tile: Tile,
        scene: Hittable,
        camera: Camera,
        rng: np.random.Generator
    ) -> np.ndarray:
        """Render one tile, in image row order, with its own generator."""
        width = self.settings.width
        height = self.settings.height
        samples = self.settings.samples_per_pixel
        max_depth = self.settings.max_depth
        environment = self.settings.environment

        x0, y0, x1, y1 = tile
        tile_image = np.zeros((y1 - y0, x1 - x0, 3), dtype=np.float64)

        for row in range(y0, y1):
            # Image row 0 is the top scanline, y = height - 1
            y = height - 1 - row
            for x in range(x0, x1):
                pixel_color = Color(0, 0, 0)

                for _ in range(samples):
                    u = (x + rng.random()) / width
                    v = (y + rng.random()) / height

                    ray = camera.get_ray(u, v, rng)
                    pixel_color = pixel_color + ray_color(
                        ray, scene, rng, 0, max_depth, environment
                    )

                tile_image[row - y0, x - x0] = pixel_color.to_array() / samples

        return tile_image

    def _generate_tiles(self, width: int, height: int) -> list[Tile]:
        """Generate tiles for parallel rendering.

        Args:
            width: Image width
            height: Image height

        Returns:
            List of tiles as (x0, y0, x1, y1) tuples in image coordinates
        """
        tile_size = self.settings.tile_size
        tiles = []

        for y in range(0, height, tile_size):
            for x in range(0, width, tile_size):
                x1 = min(x + tile_size, width)
                y1 = min(y + tile_size, height)
                tiles.append((x, y, x1, y1))

        return tiles

    def to_ldr(self, hdr_image: np.ndarray) -> np.ndarray:
        """Convert HDR image to 8-bit LDR (sqrt gamma, floor(255.99 * c)).

        Args:
            hdr_image: HDR image array (float64)

        Returns:
            LDR image as uint8 array
        """
        return to_ldr(hdr_image)

    def save_image(self, image: np.ndarray, filename: Union[str, Path]) -> None:
        """Save image to file.

        Args:
            image: Image array (HDR or LDR)
            filename: Output filename (extension determines format)
        """
        if image.dtype != np.uint8:
            image = self.to_ldr(image)
        image_io.save_image(image, filename)
