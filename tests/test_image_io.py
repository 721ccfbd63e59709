from __future__ import annotations

import io

import numpy as np
import pytest
from PIL import Image

from rosvizkit.core.image_io import decode_image_bytes, encode_image_bytes


def _png_bytes(arr: np.ndarray) -> bytes:
    out = io.BytesIO()
    Image.fromarray(arr).save(out, format="PNG")
    return out.getvalue()


def test_decode_png_rgb_and_rgba() -> None:
    rgb = (np.arange(8 * 8 * 3, dtype=np.uint16) % 251).astype(np.uint8).reshape(8, 8, 3)
    rgba = np.concatenate([rgb, np.full((8, 8, 1), 128, dtype=np.uint8)], axis=-1)

    a = decode_image_bytes(_png_bytes(rgb))
    b = decode_image_bytes(_png_bytes(rgba))

    assert a.shape == (8, 8, 3)
    assert b.shape == (8, 8, 4)
    assert np.array_equal(a, rgb)
    assert np.array_equal(b, rgba)


def test_decode_gray_png_expands_to_rgb() -> None:
    gray = np.arange(16, dtype=np.uint8).reshape(4, 4)
    out = decode_image_bytes(_png_bytes(gray))
    assert out.shape == (4, 4, 3)
    assert np.array_equal(out[..., 0], gray)


def test_jpeg_roundtrip_shape() -> None:
    rgba = np.full((16, 12, 4), 200, dtype=np.uint8)
    data = encode_image_bytes(rgba, "jpeg", quality=90)
    assert data[:2] == b"\xff\xd8"
    out = decode_image_bytes(data)
    assert out.shape == (16, 12, 3)
    assert np.max(np.abs(out.astype(int) - 200)) <= 2


def test_encode_rejects_unknown_format() -> None:
    with pytest.raises(ValueError):
        encode_image_bytes(np.zeros((2, 2), dtype=np.uint8), "tiff")


def test_decode_16bit_gray_png_keeps_range() -> None:
    gray = np.array([[0, 1000], [30000, 65535]], dtype=np.uint16)
    out = decode_image_bytes(_png_bytes(gray))
    assert out.dtype == np.uint16
    assert out.shape == (2, 2, 3)
    assert np.array_equal(out[..., 0], gray)
    assert np.array_equal(out[..., 2], gray)
