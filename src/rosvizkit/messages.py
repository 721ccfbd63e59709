from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

import numpy as np


class MessageValidationError(ValueError):
    pass


@dataclass(frozen=True)
class Time:
    secs: int
    nsecs: int = 0


@dataclass(frozen=True)
class ColorRGBA:
    r: float
    g: float
    b: float
    a: float = 1.0


@dataclass(frozen=True)
class Image:
    width: int
    height: int
    encoding: str
    data: bytes
    is_bigendian: int = 0
    step: int = 0


@dataclass(frozen=True)
class CompressedImage:
    format: str
    data: bytes


@dataclass(frozen=True)
class RegionOfInterest:
    x_offset: int
    y_offset: int
    width: int
    height: int
    do_rectify: bool = False


@dataclass(frozen=True)
class NavSatFix:
    latitude: float
    longitude: float
    altitude: float = 0.0


@dataclass(frozen=True)
class CameraInfo:
    """
    Calibration record for a single camera.

    K is the (3,3) intrinsic matrix and P the (3,4) projection matrix, both
    stored row-major in the wire message.
    """

    width: int
    height: int
    K: np.ndarray  # (3,3)
    P: np.ndarray  # (3,4)
    distortion_model: str = ""
    D: tuple[float, ...] = field(default_factory=tuple)


def _require(cond: bool, msg: str) -> None:
    if not cond:
        raise MessageValidationError(msg)


def _pick(data: dict[str, Any], *keys: str) -> Any:
    # ROS1 uses upper-case matrix keys (K, P, D), ROS2 lower-case.
    for k in keys:
        if k in data:
            return data[k]
    return None


def load_camera_info(path: Path) -> CameraInfo:
    data = json.loads(Path(path).read_text(encoding="utf-8"))
    return parse_camera_info(data)


def parse_camera_info(data: dict[str, Any]) -> CameraInfo:
    w_raw = data.get("width")
    h_raw = data.get("height")
    _require(w_raw is not None and h_raw is not None, "width and height are required")
    w = int(w_raw)
    h = int(h_raw)
    _require(w > 0 and h > 0, "width and height must be > 0")

    k_raw = _pick(data, "K", "k")
    _require(isinstance(k_raw, (list, tuple)) and len(k_raw) == 9, "K must be 9 row-major values")
    K = np.asarray([float(v) for v in k_raw], dtype=np.float64).reshape(3, 3)

    p_raw = _pick(data, "P", "p")
    if p_raw is None:
        # Monocular default: P = [K | 0].
        P = np.concatenate([K, np.zeros((3, 1), dtype=np.float64)], axis=1)
    else:
        _require(isinstance(p_raw, (list, tuple)) and len(p_raw) == 12, "P must be 12 row-major values")
        P = np.asarray([float(v) for v in p_raw], dtype=np.float64).reshape(3, 4)

    _require(bool(np.all(np.isfinite(K))) and bool(np.all(np.isfinite(P))), "K and P must be finite")

    d_raw = _pick(data, "D", "d") or []
    _require(isinstance(d_raw, (list, tuple)), "D must be a list of distortion coefficients")
    distortion_model = str(data.get("distortion_model", ""))

    return CameraInfo(
        width=w,
        height=h,
        K=K,
        P=P,
        distortion_model=distortion_model,
        D=tuple(float(v) for v in d_raw),
    )


def parse_image_header(data: dict[str, Any], payload: bytes) -> Image:
    """Build an `Image` from a JSON header (width/height/encoding/...) and raw bytes."""
    w_raw = data.get("width")
    h_raw = data.get("height")
    _require(w_raw is not None and h_raw is not None, "width and height are required")
    w = int(w_raw)
    h = int(h_raw)
    _require(w > 0 and h > 0, "width and height must be > 0")

    encoding = data.get("encoding")
    _require(isinstance(encoding, str) and len(encoding) > 0, "encoding must be a non-empty string")

    is_bigendian = int(data.get("is_bigendian", 0))
    _require(is_bigendian in (0, 1), "is_bigendian must be 0 or 1")
    step = int(data.get("step", 0))
    _require(step >= 0, "step must be >= 0")

    return Image(width=w, height=h, encoding=encoding, data=bytes(payload), is_bigendian=is_bigendian, step=step)
