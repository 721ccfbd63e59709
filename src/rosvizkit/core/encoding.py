from __future__ import annotations

import logging
from enum import Enum

import numpy as np

logger = logging.getLogger(__name__)


class UnsupportedEncodingError(ValueError):
    pass


class PixelFormat(Enum):
    """
    Decoded pixel layouts, as (bit depth per channel, channel count, numpy kind).
    """

    R8 = (8, 1, "u")
    RG16 = (8, 2, "u")
    RGB24 = (8, 3, "u")
    RGBA32 = (8, 4, "u")
    R16 = (16, 1, "u")
    RG32 = (16, 2, "u")
    RGB48 = (16, 3, "u")
    RGBA64 = (16, 4, "u")
    RFloat = (32, 1, "f")
    RGFloat = (32, 2, "f")
    RGBAFloat = (32, 4, "f")

    @property
    def bit_depth(self) -> int:
        return self.value[0]

    @property
    def channels(self) -> int:
        return self.value[1]

    @property
    def dtype(self) -> np.dtype:
        return np.dtype(f"{self.value[2]}{self.bit_depth // 8}")

    @property
    def bytes_per_pixel(self) -> int:
        return self.channels * self.bit_depth // 8


_ENCODING_TO_FORMAT: dict[str, PixelFormat] = {
    "8UC1": PixelFormat.R8,
    "8UC2": PixelFormat.RG16,
    "8UC3": PixelFormat.RGB24,
    "8UC4": PixelFormat.RGBA32,
    "8SC1": PixelFormat.R8,
    "8SC2": PixelFormat.RG16,
    "8SC3": PixelFormat.RGB24,
    "8SC4": PixelFormat.RGBA32,
    "16UC1": PixelFormat.R16,
    "16UC2": PixelFormat.RG32,
    "16UC3": PixelFormat.RGB48,
    "16UC4": PixelFormat.RGBA64,
    "16SC1": PixelFormat.R16,
    "16SC2": PixelFormat.RG32,
    "16SC3": PixelFormat.RGB48,
    "16SC4": PixelFormat.RGBA64,
    "32FC1": PixelFormat.RFloat,
    "32FC2": PixelFormat.RGFloat,
    "32FC4": PixelFormat.RGBAFloat,
    "64FC1": PixelFormat.RGB24,
    "64FC2": PixelFormat.RGB24,
    "64FC3": PixelFormat.RGB24,
    "64FC4": PixelFormat.RGB24,
    "mono8": PixelFormat.R8,
    "mono16": PixelFormat.R16,
    "bgr8": PixelFormat.RGB24,
    "rgb8": PixelFormat.RGB24,
    "bgra8": PixelFormat.RGBA32,
    "rgba8": PixelFormat.RGBA32,
    "bayer_rggb8": PixelFormat.R8,
    "bayer_bggr8": PixelFormat.R8,
    "bayer_gbrg8": PixelFormat.R8,
    "bayer_grbg8": PixelFormat.R8,
    "bayer_rggb16": PixelFormat.R16,
    "bayer_bggr16": PixelFormat.R16,
    "bayer_gbrg16": PixelFormat.R16,
    "bayer_grbg16": PixelFormat.R16,
}

# Known encodings with no matching pixel format.
_UNSUPPORTED_ENCODINGS = frozenset({"32SC1", "32SC2", "32SC3", "32SC4", "32FC3"})

# Channel-within-pixel source index when swapping BGR(A) <-> RGB(A).
_CHANNEL_SWAP = np.array([2, 1, 0, 3], dtype=np.int64)


def encoding_channels(encoding: str) -> int:
    """
    Number of interleaved channels in a raw buffer, guessed from its encoding name.

    This is a substring heuristic, not a table lookup: "bayer_rggb8" -> 1,
    "bgra8" -> 4 (contains "a"), anything unmatched -> 3.
    """
    if encoding.endswith("1") or "mono" in encoding or "bayer" in encoding:
        return 1
    if encoding.endswith("4") or "a" in encoding:
        return 4
    return 3


def encoding_to_pixel_format(encoding: str) -> PixelFormat:
    if encoding in _UNSUPPORTED_ENCODINGS:
        raise UnsupportedEncodingError(f"encoding {encoding!r} has no supported pixel format")
    fmt = _ENCODING_TO_FORMAT.get(encoding)
    if fmt is None:
        logger.debug("Unknown encoding %r, falling back to %s", encoding, PixelFormat.RGB24.name)
        return PixelFormat.RGB24
    return fmt


def encoding_representation(encoding: str) -> tuple[int, int]:
    """Returns (bit_depth, channels) of the pixel format an encoding decodes to."""
    fmt = encoding_to_pixel_format(encoding)
    return fmt.bit_depth, fmt.channels


def reorder_pixels(
    data: bytes,
    encoding: str,
    width: int,
    height: int,
    convert: bool,
    flip_y: bool,
) -> bytes:
    """
    Swap B/R channels and/or flip rows of a raw image buffer.

    With `convert`, channel k of every pixel is read from channel (2,1,0,3)[k]
    (no-op for single-channel buffers). With `flip_y`, row r is written to
    row height-1-r. Both are applied as views and gathered in a single copy.

    If neither is requested the input object is returned as-is. Otherwise a new
    `bytes` of the same length is returned.
    """
    if not convert and not flip_y:
        return data

    width = int(width)
    height = int(height)
    if width <= 0 or height <= 0:
        raise ValueError("width and height must be > 0")

    channels = encoding_channels(encoding)
    src = np.frombuffer(data, dtype=np.uint8)
    if src.size != width * height * channels:
        raise ValueError(
            f"buffer has {src.size} bytes, expected {width}x{height}x{channels}={width * height * channels}"
        )

    rows = src.reshape(height, width, channels)
    if flip_y:
        rows = rows[::-1]
    if convert and channels > 1:
        rows = rows[..., _CHANNEL_SWAP[:channels]]
    return np.ascontiguousarray(rows).tobytes()
