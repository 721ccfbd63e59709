from __future__ import annotations

import json
from pathlib import Path

import numpy as np
from PIL import Image

from rosvizkit.cli.main import main


def _write_camera_info(path: Path) -> None:
    path.write_text(
        json.dumps({"width": 4, "height": 3, "K": [2, 0, 1, 0, 2, 1, 0, 0, 1]}),
        encoding="utf-8",
    )


def test_convert_image_bgr8_to_png(tmp_path: Path) -> None:
    raw = tmp_path / "frame.raw"
    raw.write_bytes(bytes([0, 0, 255] * 6))  # 3x2 pure red in BGR
    out = tmp_path / "out" / "frame.png"

    assert main(["convert-image", str(raw), "--encoding", "bgr8", "--width", "3", "--height", "2", "--convert", "--out", str(out)]) == 0

    with Image.open(out) as im:
        arr = np.asarray(im.convert("RGB"))
    assert arr.shape == (2, 3, 3)
    assert arr[0, 0].tolist() == [255, 0, 0]


def test_convert_image_float_depth(tmp_path: Path) -> None:
    raw = tmp_path / "depth.raw"
    raw.write_bytes(np.array([0.0, 1.0, 2.0, 4.0], dtype="<f4").tobytes())
    out = tmp_path / "depth.png"
    assert main(["convert-image", str(raw), "--encoding", "32FC1", "--width", "2", "--height", "2", "--out", str(out)]) == 0
    with Image.open(out) as im:
        arr = np.asarray(im)
    assert arr[0, 0] == 0
    assert arr[1, 1] == 255


def test_invert_intrinsics_prints_matrix(tmp_path: Path, capsys) -> None:
    info = tmp_path / "camera_info.json"
    _write_camera_info(info)
    assert main(["invert-intrinsics", str(info)]) == 0
    rows = [list(map(float, line.split())) for line in capsys.readouterr().out.strip().splitlines()]
    assert np.allclose(rows, [[0.5, 0.0, -0.5], [0.0, 0.5, -0.5], [0.0, 0.0, 1.0]])


def test_pixel_rays_writes_npy(tmp_path: Path) -> None:
    info = tmp_path / "camera_info.json"
    _write_camera_info(info)
    out = tmp_path / "rays.npy"
    assert main(["pixel-rays", str(info), "--out", str(out), "--normalize"]) == 0
    rays = np.load(out)
    assert rays.shape == (12, 3)
    assert np.allclose(rays[:, 2], 1.0)
    assert np.allclose(rays[0], [-0.5, -0.5, 1.0])
