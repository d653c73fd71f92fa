# images.py
from dataclasses import dataclass
from io import BytesIO

import numpy as np
from PIL import Image, UnidentifiedImageError

MAX_EDGE = 1280
JPEG_QUALITY = 85


class ImageError(ValueError):
    pass


@dataclass
class UploadedImage:
    data: bytes
    filename: str
    mimetype: str
    width: int
    height: int


def _open(raw: bytes) -> Image.Image:
    try:
        probe = Image.open(BytesIO(raw))
        probe.verify()  # verify() leaves the image unusable, reopen below
        return Image.open(BytesIO(raw))
    except (UnidentifiedImageError, OSError, SyntaxError) as e:
        raise ImageError(f"Invalid image data: {e}")


def normalize_image(raw: bytes, filename: str = "waste-image.jpg") -> UploadedImage:
    """
    Re-encode an upload as RGB JPEG, downscaled so the long edge is at most MAX_EDGE.
    """
    if not raw:
        raise ImageError("No image data provided.")
    img = _open(raw).convert("RGB")
    if max(img.size) > MAX_EDGE:
        img.thumbnail((MAX_EDGE, MAX_EDGE))

    out = BytesIO()
    img.save(out, format="JPEG", quality=JPEG_QUALITY)
    stem = (filename or "waste-image").rsplit(".", 1)[0] or "waste-image"
    return UploadedImage(out.getvalue(), f"{stem}.jpg", "image/jpeg", img.width, img.height)


def load_upload(file_storage, default_name: str = "waste-image.jpg") -> UploadedImage:
    if file_storage is None:
        raise ImageError("No image data provided.")
    return normalize_image(file_storage.read(), file_storage.filename or default_name)


def lighting_condition(raw: bytes) -> str:
    img = _open(raw).convert("L").resize((64, 64))
    mean = float(np.asarray(img, dtype=np.float32).mean())
    if mean < 60:
        return "low light"
    if mean < 120:
        return "overcast"
    return "daylight"
