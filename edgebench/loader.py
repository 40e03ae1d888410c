from pathlib import Path

import cv2
import numpy as np


class ImageDecodeError(IOError):
    pass


def load_image(path) -> np.ndarray:
    """Read a color image (BGR, uint8). Raises ImageDecodeError on any failure."""
    path = Path(path)
    if not path.is_file():
        raise ImageDecodeError(f"image not found: {path}")
    img = cv2.imread(str(path), cv2.IMREAD_COLOR)
    if img is None:
        raise ImageDecodeError(f"failed to decode image: {path}")
    h, w = img.shape[:2]
    print(f"[load] {path.name} ({w}x{h})")
    return img
