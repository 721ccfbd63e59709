from __future__ import annotations

import io

import numpy as np
from PIL import Image


def decode_image_bytes(data: bytes) -> np.ndarray:
    """
    Decode a compressed image blob (jpeg/png/webp) into an RGB or RGBA array.

    8-bit sources give uint8, 16-bit sources give uint16 with full range kept.
    Grayscale is expanded to three equal channels.

    Primary backend is OpenCV (if installed). Pillow is used as a fallback.
    OpenCV returns BGR(A); channels are reordered to RGB(A) so both backends agree.
    Pillow only keeps 16 bits for grayscale; 16-bit color PNGs need OpenCV.
    """
    try:
        import cv2  # type: ignore

        buf = np.frombuffer(bytes(data), dtype=np.uint8)
        img = cv2.imdecode(buf, cv2.IMREAD_UNCHANGED)
        if img is not None and img.dtype in (np.uint8, np.uint16):
            if img.ndim == 2:
                return cv2.cvtColor(img, cv2.COLOR_GRAY2RGB)
            if img.shape[2] == 4:
                return cv2.cvtColor(img, cv2.COLOR_BGRA2RGBA)
            return cv2.cvtColor(img, cv2.COLOR_BGR2RGB)
    except Exception:
        # Fall back to Pillow below.
        pass

    with Image.open(io.BytesIO(bytes(data))) as im:
        if im.mode.startswith("I"):
            # 16-bit grayscale ("I;16*") or 32-bit integer ("I").
            gray = np.clip(np.asarray(im), 0, 65535).astype(np.uint16)
            return np.repeat(gray[..., None], 3, axis=-1)
        im = im.convert("RGBA" if "A" in im.getbands() else "RGB")
        arr = np.asarray(im, dtype=np.uint8)
    return arr


def encode_image_bytes(arr: np.ndarray, image_format: str = "jpeg", quality: int = 95) -> bytes:
    """Encode a uint8 (H,W), (H,W,3) or (H,W,4) array with Pillow."""
    fmt = image_format.lower()
    arr = np.asarray(arr)
    if arr.dtype != np.uint8:
        arr = np.clip(arr, 0, 255).astype(np.uint8)
    im = Image.fromarray(arr)

    out = io.BytesIO()
    if fmt == "png":
        im.save(out, format="PNG")
    elif fmt in ("jpg", "jpeg"):
        if im.mode == "RGBA":
            im = im.convert("RGB")
        q = max(0, min(100, int(quality)))
        im.save(out, format="JPEG", quality=q, subsampling=0)
    else:
        raise ValueError("image_format must be png|jpeg")
    return out.getvalue()
