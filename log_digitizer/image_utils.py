from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Optional, Union

import numpy as np
from PIL import Image, ImageGrab, UnidentifiedImageError


class ImageLoadError(RuntimeError):
    pass


@dataclass(frozen=True)
class DecodedImage:
    width: int
    height: int
    # opaque to the engine; a PIL image here
    bitmap: Any = None


def decoded_from_pil(img: Image.Image) -> DecodedImage:
    rgba = img.convert("RGBA")
    w, h = rgba.size
    return DecodedImage(width=int(w), height=int(h), bitmap=rgba)


def load_image(path: Union[str, Path]) -> DecodedImage:
    try:
        with Image.open(path) as img:
            img.load()
            return decoded_from_pil(img)
    except (OSError, UnidentifiedImageError) as e:
        raise ImageLoadError(f"Cannot open image: {path}") from e


def grab_clipboard_image() -> Optional[DecodedImage]:
    """Image currently on the clipboard, or None when it holds something else."""
    try:
        data = ImageGrab.grabclipboard()
    except (OSError, NotImplementedError) as e:
        raise ImageLoadError("Clipboard is not accessible on this platform.") from e
    if isinstance(data, Image.Image):
        return decoded_from_pil(data)
    if isinstance(data, list):
        # file paths copied from a file manager
        for p in data:
            try:
                return load_image(p)
            except ImageLoadError:
                continue
    return None


def to_rgba_array(image: DecodedImage) -> np.ndarray:
    """(H, W, 4) uint8 pixels for renderers that composite with numpy."""
    if image.bitmap is None:
        raise ValueError("DecodedImage has no bitmap attached")
    return np.asarray(image.bitmap.convert("RGBA"), dtype=np.uint8)
