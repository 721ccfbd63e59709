from __future__ import annotations

import logging

import numpy as np

from rosvizkit.core.encoding import PixelFormat, encoding_channels, encoding_to_pixel_format, reorder_pixels
from rosvizkit.core.image_io import decode_image_bytes, encode_image_bytes
from rosvizkit.messages import CompressedImage, Image, RegionOfInterest

logger = logging.getLogger(__name__)

_SWAP_INDEX = np.array([2, 1, 0, 3], dtype=np.int64)
_ROI_COLOR = np.array([255, 0, 0, 255], dtype=np.uint8)


def _pixel_dtype(fmt: PixelFormat, big_endian: bool) -> np.dtype:
    dt = fmt.dtype
    if dt.itemsize > 1:
        dt = dt.newbyteorder(">" if big_endian else "<")
    return dt


def image_to_array(msg: Image, convert: bool = False, flip_y: bool = False) -> np.ndarray:
    """
    Decode a raw `Image` into an (H,W) or (H,W,C) array.

    The dtype and channel count come from `encoding_to_pixel_format`. The buffer
    must already have the byte layout of that format; nothing is resampled.
    `convert` swaps the first and third channels (BGR <-> RGB), `flip_y`
    flips rows. Rows padded to `msg.step` bytes are unpadded first; a step of
    0 means tightly packed rows.
    """
    fmt = encoding_to_pixel_format(msg.encoding)
    w, h = int(msg.width), int(msg.height)
    row_bytes = w * fmt.bytes_per_pixel
    step = int(msg.step) or row_bytes
    if step < row_bytes:
        raise ValueError(f"step {step} is shorter than a {w} px {fmt.name} row ({row_bytes} bytes)")
    if len(msg.data) != step * h:
        raise ValueError(
            f"{msg.encoding} image of {w}x{h} with step {step} needs {step * h} bytes for {fmt.name}, "
            f"got {len(msg.data)}"
        )

    data = msg.data
    if step > row_bytes:
        data = np.frombuffer(data, dtype=np.uint8).reshape(h, step)[:, :row_bytes].tobytes()

    dtype = _pixel_dtype(fmt, bool(msg.is_bigendian))
    if fmt.bit_depth == 8 and fmt.channels == encoding_channels(msg.encoding):
        data = reorder_pixels(data, msg.encoding, w, h, convert, flip_y)
        arr = np.frombuffer(data, dtype=dtype).reshape(h, w, fmt.channels)
    else:
        # Multi-byte samples: reorder whole samples instead of bytes.
        arr = np.frombuffer(data, dtype=dtype).reshape(h, w, fmt.channels)
        if flip_y:
            arr = arr[::-1]
        if convert and fmt.channels >= 3:
            arr = arr[..., _SWAP_INDEX[: fmt.channels]]

    arr = arr.astype(dtype.newbyteorder("="), copy=True)
    if fmt.channels == 1:
        return arr[..., 0]
    return arr


def compressed_to_array(msg: CompressedImage) -> np.ndarray:
    return decode_image_bytes(msg.data)


def array_to_image(arr: np.ndarray, encoding: str = "rgba8") -> Image:
    fmt = encoding_to_pixel_format(encoding)
    arr = np.asarray(arr)
    if arr.ndim == 2:
        arr = arr[..., None]
    if arr.ndim != 3 or arr.shape[2] != fmt.channels:
        raise ValueError(f"array of shape {arr.shape} does not match {encoding} ({fmt.channels} channels)")

    h, w = int(arr.shape[0]), int(arr.shape[1])
    data = np.ascontiguousarray(arr.astype(_pixel_dtype(fmt, big_endian=False))).tobytes()
    return Image(
        width=w,
        height=h,
        encoding=encoding,
        data=data,
        is_bigendian=0,
        step=w * fmt.bytes_per_pixel,
    )


def array_to_compressed(arr: np.ndarray, format: str = "jpeg", quality: int = 95) -> CompressedImage:
    return CompressedImage(format=format, data=encode_image_bytes(arr, image_format=format, quality=quality))


def region_of_interest(
    roi: RegionOfInterest, image: np.ndarray | None = None, width: int = 0, height: int = 0
) -> np.ndarray:
    """
    Crop `image` to `roi`, or, without an image, draw the ROI on an empty canvas.

    The canvas is RGBA uint8 of size (height, width). When either is 0 it is sized
    to fit the ROI plus a 10 px margin. The ROI block is painted opaque red.
    """
    x0, y0 = int(roi.x_offset), int(roi.y_offset)
    rw, rh = int(roi.width), int(roi.height)

    if image is not None:
        img = np.asarray(image)
        if y0 + rh > img.shape[0] or x0 + rw > img.shape[1]:
            raise ValueError(f"ROI {(x0, y0, rw, rh)} exceeds image of shape {img.shape[:2]}")
        return img[y0 : y0 + rh, x0 : x0 + rw].copy()

    if width == 0 or height == 0:
        width = x0 + rw + 10
        height = y0 + rh + 10
    elif y0 + rh > height or x0 + rw > width:
        raise ValueError(f"ROI {(x0, y0, rw, rh)} exceeds canvas of {width}x{height}")
    canvas = np.zeros((int(height), int(width), 4), dtype=np.uint8)
    canvas[y0 : y0 + rh, x0 : x0 + rw] = _ROI_COLOR
    logger.debug("ROI overlay %dx%d at (%d,%d) on %dx%d canvas", rw, rh, x0, y0, width, height)
    return canvas
