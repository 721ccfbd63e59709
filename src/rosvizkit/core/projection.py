from __future__ import annotations

from typing import Sequence

import numpy as np

from rosvizkit.core.linalg import matrix_inverse
from rosvizkit.messages import CameraInfo


def intrinsic_matrix(values: Sequence[float] | np.ndarray) -> np.ndarray:
    """
    K as a (3,3) array from 9 row-major values:

      0 1 2
      3 4 5
      6 7 8
    """
    k = np.asarray(values, dtype=np.float64)
    if k.size != 9:
        raise ValueError(f"intrinsic matrix needs 9 values, got {k.size}")
    return k.reshape(3, 3)


def projection_matrix(values: Sequence[float] | np.ndarray) -> np.ndarray:
    """
    P as a (3,4) array from 12 row-major values:

      0 1  2  3
      4 5  6  7
      8 9 10 11
    """
    p = np.asarray(values, dtype=np.float64)
    if p.size != 12:
        raise ValueError(f"projection matrix needs 12 values, got {p.size}")
    return p.reshape(3, 4)


def pixel_to_world_direction(x: float, y: float, inv_k: np.ndarray) -> np.ndarray:
    """
    Camera-space ray direction of pixel (x,y): inv_k @ (x, y, 1).

    The result is not normalized; its z is whatever the inverse intrinsics give
    (1 for a standard K). See `pixel_to_image_plane` for the z=1 variant.
    """
    inv_k = np.asarray(inv_k, dtype=np.float64).reshape(3, 3)
    return inv_k @ np.array([float(x), float(y), 1.0], dtype=np.float64)


def pixel_to_image_plane(x: float, y: float, inv_k: np.ndarray) -> np.ndarray:
    """Same ray as `pixel_to_world_direction`, scaled so that z == 1."""
    d = pixel_to_world_direction(x, y, inv_k)
    return d / d[2]


def pixels_to_world_directions(
    u: np.ndarray, v: np.ndarray, inv_k: np.ndarray, *, normalize: bool = False
) -> np.ndarray:
    """Vectorized back-projection. Returns (...,3) for broadcastable u, v."""
    inv_k = np.asarray(inv_k, dtype=np.float64).reshape(3, 3)
    u = np.asarray(u, dtype=np.float64)
    v = np.asarray(v, dtype=np.float64)
    uv1 = np.stack(np.broadcast_arrays(u, v, np.ones_like(u)), axis=-1)
    dirs = uv1 @ inv_k.T
    if normalize:
        dirs = dirs / dirs[..., 2:3]
    return dirs


def pixels_in_world(camera_info: CameraInfo, *, normalize: bool = False) -> np.ndarray:
    """
    Back-project every pixel of the camera image.

    K is inverted once. Rows are ordered x-major: row x*height + y holds pixel (x,y).
    """
    inv_k = matrix_inverse(intrinsic_matrix(camera_info.K))
    xx, yy = np.meshgrid(
        np.arange(camera_info.width, dtype=np.float64),
        np.arange(camera_info.height, dtype=np.float64),
        indexing="ij",
    )
    return pixels_to_world_directions(xx.reshape(-1), yy.reshape(-1), inv_k, normalize=normalize)
