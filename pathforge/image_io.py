"""
Image output.

Images handed to the writers are uint8 arrays of shape (height, width, 3)
whose row 0 is the top of the picture. Each format fixes its own row order:

- Plain-text P3 PPM: top row first
- 32-bit BMP: bottom row first, as bitmaps are stored
- Anything else: delegated to Pillow
"""

from __future__ import annotations
import logging
import struct
from pathlib import Path
from typing import Union

import numpy as np
from PIL import Image as PILImage

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]

BMP_FILE_HEADER_SIZE = 14
BMP_INFO_HEADER_SIZE = 40
# 72 DPI
BMP_PIXELS_PER_METER = 2835


def _check_image(image: np.ndarray) -> None:
    if image.ndim != 3 or image.shape[2] != 3:
        raise ValueError(f"Expected an (H, W, 3) image, got shape {image.shape}")
    if image.dtype != np.uint8:
        raise ValueError(f"Expected a uint8 image, got {image.dtype}")


def encode_ppm(image: np.ndarray) -> bytes:
    """Encode an image as a plain-text P3 PPM stream."""
    _check_image(image)
    height, width = image.shape[:2]
    lines = [f"P3\n{width} {height}\n255\n"]
    for r, g, b in image.reshape(-1, 3):
        lines.append(f"{r} {g} {b}\n")
    return "".join(lines).encode("ascii")


def encode_bmp(image: np.ndarray) -> bytes:
    """Encode an image as an uncompressed 32 bits-per-pixel bitmap.

    Each pixel is the little-endian word 0x00RRGGBB, so the bytes on disk
    are B, G, R, 0.
    """
    _check_image(image)
    height, width = image.shape[:2]

    pixels = np.zeros((height, width, 4), dtype=np.uint8)
    pixels[..., 0] = image[..., 2]
    pixels[..., 1] = image[..., 1]
    pixels[..., 2] = image[..., 0]
    pixel_bytes = pixels[::-1].tobytes()

    offset = BMP_FILE_HEADER_SIZE + BMP_INFO_HEADER_SIZE
    file_header = struct.pack('<2sIHHI', b'BM', offset + len(pixel_bytes), 0, 0, offset)
    info_header = struct.pack(
        '<IiiHHIIiiII',
        BMP_INFO_HEADER_SIZE,
        width,
        height,          # positive height: bottom-up rows
        1,               # planes
        32,              # bits per pixel
        0,               # BI_RGB
        len(pixel_bytes),
        BMP_PIXELS_PER_METER,
        BMP_PIXELS_PER_METER,
        0,
        0
    )
    return file_header + info_header + pixel_bytes


def write_ppm(image: np.ndarray, filename: PathLike) -> None:
    """Write a P3 PPM file."""
    Path(filename).write_bytes(encode_ppm(image))
    logger.info("Wrote PPM image %s (%dx%d)", filename, image.shape[1], image.shape[0])


def write_bmp(image: np.ndarray, filename: PathLike) -> None:
    """Write a 32-bit BMP file."""
    Path(filename).write_bytes(encode_bmp(image))
    logger.info("Wrote BMP image %s (%dx%d)", filename, image.shape[1], image.shape[0])


def is_supported_format(filename: PathLike) -> bool:
    """Whether the file extension names a format `save_image` can write."""
    suffix = Path(filename).suffix.lower()
    if suffix in ('.ppm', '.bmp'):
        return True
    # Pillow knows some formats it can only read
    return PILImage.registered_extensions().get(suffix) in PILImage.SAVE


def save_image(image: np.ndarray, filename: PathLike) -> None:
    """Save an 8-bit image, choosing the format from the file extension.

    Args:
        image: uint8 image array (H, W, 3), top row first
        filename: Output filename (.ppm, .bmp, or any format Pillow knows)

    Raises:
        ValueError: If the extension names no known image format
    """
    if not is_supported_format(filename):
        raise ValueError(f"Unsupported image format: {filename}")
    suffix = Path(filename).suffix.lower()
    if suffix == '.ppm':
        write_ppm(image, filename)
    elif suffix == '.bmp':
        write_bmp(image, filename)
    else:
        _check_image(image)
        PILImage.fromarray(image).save(filename)
        logger.info("Wrote image %s (%dx%d)", filename, image.shape[1], image.shape[0])
