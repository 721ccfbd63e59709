from __future__ import annotations

import argparse
import logging
from pathlib import Path

import numpy as np
from PIL import Image as PILImage

from rosvizkit.api.image_conversion import image_to_array
from rosvizkit.core.linalg import matrix_inverse
from rosvizkit.core.projection import pixels_in_world
from rosvizkit.messages import Image, load_camera_info

logger = logging.getLogger(__name__)


def _setup_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format="%(asctime)s - %(levelname)s - %(message)s",
        force=True,
    )


def convert_image(
    raw_path: Path,
    *,
    encoding: str,
    width: int,
    height: int,
    convert: bool,
    flip_y: bool,
    out_path: Path,
    big_endian: bool = False,
) -> Path:
    msg = Image(
        width=width,
        height=height,
        encoding=encoding,
        data=Path(raw_path).read_bytes(),
        is_bigendian=int(big_endian),
    )
    arr = image_to_array(msg, convert=convert, flip_y=flip_y)
    if arr.dtype != np.uint8:
        # Pillow has no float or 16-bit multi-channel modes; rescale to 8 bit.
        a = arr.astype(np.float64)
        lo, hi = float(np.nanmin(a)), float(np.nanmax(a))
        scale = 255.0 / (hi - lo) if hi > lo else 0.0
        arr = np.clip((a - lo) * scale, 0, 255).astype(np.uint8)
        logger.info("Rescaled %s range [%g, %g] to 8 bit", encoding, lo, hi)
    if arr.ndim == 3 and arr.shape[2] == 2:
        arr = arr[..., 0]

    out_path = Path(out_path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    PILImage.fromarray(arr).save(out_path)
    logger.info("Converted %s (%dx%d, %s) -> %s", raw_path, width, height, encoding, out_path)
    return out_path


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="rosvizkit")
    parser.add_argument("--log-level", default="INFO", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    sub = parser.add_subparsers(dest="cmd", required=True)

    conv = sub.add_parser("convert-image", help="Convert a raw sensor_msgs/Image payload into a PNG.")
    conv.add_argument("raw", type=Path, help="File holding the raw image bytes.")
    conv.add_argument("--encoding", type=str, required=True, help="Image encoding, e.g. bgr8, mono16, 32FC1.")
    conv.add_argument("--width", type=int, required=True)
    conv.add_argument("--height", type=int, required=True)
    conv.add_argument("--convert", action="store_true", help="Swap first and third channels (BGR <-> RGB).")
    conv.add_argument("--flip-y", action="store_true", help="Flip rows vertically.")
    conv.add_argument("--big-endian", action="store_true", help="Multi-byte samples are big-endian.")
    conv.add_argument("--out", type=Path, required=True)

    inv = sub.add_parser("invert-intrinsics", help="Print the inverse of K from a CameraInfo JSON file.")
    inv.add_argument("camera_info", type=Path)

    rays = sub.add_parser("pixel-rays", help="Back-project every pixel through K^-1 and save an (W*H,3) .npy.")
    rays.add_argument("camera_info", type=Path)
    rays.add_argument("--out", type=Path, required=True)
    rays.add_argument("--normalize", action="store_true", help="Scale each ray so that z == 1.")

    args = parser.parse_args(argv)
    _setup_logging(args.log_level)

    if args.cmd == "convert-image":
        out = convert_image(
            args.raw,
            encoding=args.encoding,
            width=args.width,
            height=args.height,
            convert=args.convert,
            flip_y=args.flip_y,
            out_path=args.out,
            big_endian=args.big_endian,
        )
        print(f"Wrote {out}")
        return 0

    if args.cmd == "invert-intrinsics":
        info = load_camera_info(args.camera_info)
        inv_k = matrix_inverse(info.K)
        for row in inv_k:
            print(" ".join(f"{v:.12g}" for v in row))
        return 0

    if args.cmd == "pixel-rays":
        info = load_camera_info(args.camera_info)
        dirs = pixels_in_world(info, normalize=args.normalize)
        args.out.parent.mkdir(parents=True, exist_ok=True)
        np.save(args.out, dirs)
        logger.info("Back-projected %dx%d pixels", info.width, info.height)
        print(f"Wrote {args.out}")
        return 0

    raise AssertionError(f"Unhandled cmd: {args.cmd}")
