"""
Conversion of linear HDR radiance to 8-bit display values.

The display transfer is the square root per channel, a gamma 2
approximation of sRGB.
"""

from __future__ import annotations

import numpy as np


def linear_to_srgb(linear: np.ndarray) -> np.ndarray:
    """Approximate the sRGB curve with a square root.

    Args:
        linear: Linear RGB image (H, W, 3), values >= 0

    Returns:
        Display-referred image (H, W, 3), values in [0, 1]
    """
    return np.sqrt(np.clip(linear, 0.0, 1.0))


def quantize(image: np.ndarray) -> np.ndarray:
    """Map [0, 1] channels to 8-bit integers with floor(255.99 * c)."""
    return np.clip(np.floor(255.99 * image), 0, 255).astype(np.uint8)


def to_ldr(hdr_image: np.ndarray) -> np.ndarray:
    """Convert a linear HDR image to a displayable uint8 image."""
    return quantize(linear_to_srgb(hdr_image))
