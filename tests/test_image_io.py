"""Tests for image writers."""

import pytest
import struct
import numpy as np
from PIL import Image

from pathforge.image_io import (
    encode_ppm, encode_bmp, write_ppm, write_bmp, save_image, is_supported_format
)


@pytest.fixture
def image():
    """2x3 image; row 0 is the top of the picture."""
    return np.array([
        [[255, 0, 0], [0, 255, 0], [0, 0, 255]],
        [[10, 20, 30], [40, 50, 60], [70, 80, 90]],
    ], dtype=np.uint8)


class TestPpm:
    """Test plain-text PPM output."""

    def test_header(self, image):
        data = encode_ppm(image)
        assert data.startswith(b"P3\n3 2\n255\n")

    def test_pixels_top_row_first(self, image):
        lines = encode_ppm(image).decode("ascii").splitlines()
        assert lines[3:] == [
            "255 0 0", "0 255 0", "0 0 255",
            "10 20 30", "40 50 60", "70 80 90",
        ]

    def test_write_file(self, image, tmp_path):
        path = tmp_path / "out.ppm"
        write_ppm(image, path)
        assert path.read_bytes() == encode_ppm(image)

    def test_rejects_float_image(self):
        with pytest.raises(ValueError):
            encode_ppm(np.zeros((1, 1, 3)))


class TestBmp:
    """Test 32-bit bitmap output."""

    def test_headers(self, image):
        data = encode_bmp(image)
        magic, size, _, _, offset = struct.unpack('<2sIHHI', data[:14])
        assert magic == b'BM'
        assert offset == 54
        assert size == len(data) == 54 + 3 * 2 * 4

        header_size, width, height, planes, bpp, compression = struct.unpack('<IiiHHI', data[14:34])
        assert header_size == 40
        assert (width, height) == (3, 2)
        assert planes == 1
        assert bpp == 32
        assert compression == 0

    def test_pixels_bottom_up_xrgb(self, image):
        data = encode_bmp(image)
        words = struct.unpack('<6I', data[54:])
        # First stored row is the bottom of the picture
        assert words[:3] == (0x000A141E, 0x0028323C, 0x0046505A)
        assert words[3:] == (0x00FF0000, 0x0000FF00, 0x000000FF)

    def test_readable_by_pillow(self, image, tmp_path):
        path = tmp_path / "out.bmp"
        write_bmp(image, path)
        with Image.open(path) as im:
            assert im.size == (3, 2)
            assert np.array_equal(np.asarray(im.convert('RGB')), image)


class TestSaveImage:
    """Test format dispatch."""

    def test_ppm_extension(self, image, tmp_path):
        path = tmp_path / "out.PPM"
        save_image(image, path)
        assert path.read_bytes().startswith(b"P3\n")

    def test_bmp_extension(self, image, tmp_path):
        path = tmp_path / "out.bmp"
        save_image(image, str(path))
        assert path.read_bytes()[:2] == b'BM'

    def test_png_via_pillow(self, image, tmp_path):
        path = tmp_path / "out.png"
        save_image(image, path)
        with Image.open(path) as im:
            assert np.array_equal(np.asarray(im), image)

    def test_unwritable_path(self, image, tmp_path):
        with pytest.raises(OSError):
            save_image(image, tmp_path / "missing" / "out.ppm")

    @pytest.mark.parametrize("name", ["out.xyz", "out"])
    def test_unknown_extension(self, image, tmp_path, name):
        with pytest.raises(ValueError):
            save_image(image, tmp_path / name)
        assert not (tmp_path / name).exists()


class TestSupportedFormat:
    """Test output format detection."""

    @pytest.mark.parametrize("name", ["a.ppm", "a.BMP", "a.png", "a.jpg", "dir/a.tiff"])
    def test_supported(self, name):
        assert is_supported_format(name)

    @pytest.mark.parametrize("name", ["a.xyz", "a", "a.ppm.txt"])
    def test_unsupported(self, name):
        assert not is_supported_format(name)
