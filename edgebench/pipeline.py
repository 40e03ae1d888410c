"""
The fixed grayscale -> Gaussian blur -> Canny pipeline, on host arrays and
on device-resident cv2.UMat buffers.
"""

import cv2
import numpy as np

# ------------------------------ stage parameters -----------------------------
BLUR_KSIZE = (7, 7)
BLUR_SIGMA = 1.5
BORDER = cv2.BORDER_DEFAULT
CANNY_LOW = 0.0
CANNY_HIGH = 50.0
CANNY_APERTURE = 3
CANNY_L2 = False

GRAY_CODES = {
    1: None,
    3: cv2.COLOR_BGR2GRAY,
    4: cv2.COLOR_BGRA2GRAY,
}


def channels_of(img: np.ndarray) -> int:
    if img.ndim == 2:
        return 1
    if img.ndim == 3:
        return img.shape[2]
    raise ValueError(f"expected a 2D or 3D image array, got shape {img.shape}")


def gray_code(channels: int):
    if channels not in GRAY_CODES:
        raise ValueError(f"unsupported channel count for grayscale stage: {channels}")
    return GRAY_CODES[channels]


# ----------------------------------- host ------------------------------------
def cpu_pipeline(img: np.ndarray) -> np.ndarray:
    code = gray_code(channels_of(img))
    if code is None:
        gray = img.reshape(img.shape[:2])
    else:
        gray = cv2.cvtColor(img, code)
    blur = cv2.GaussianBlur(gray, BLUR_KSIZE, BLUR_SIGMA, sigmaY=0, borderType=BORDER)
    return cv2.Canny(blur, CANNY_LOW, CANNY_HIGH, apertureSize=CANNY_APERTURE, L2gradient=CANNY_L2)


# ---------------------------------- device -----------------------------------
class DeviceBuffers:
    """
    Owns the uploaded input and the three stage outputs as cv2.UMat, reused
    across iterations.

    Protocol: warm_up() once (untimed, absorbs OpenCL kernel compilation),
    run() any number of times, finish() before reading edges() or trusting a
    timing. close() (or leaving the with-block) drops every device buffer.
    """

    def __init__(self, src: np.ndarray, ocl=None):
        self._ocl = cv2.ocl if ocl is None else ocl
        self._code = gray_code(channels_of(src))
        if self._code is None:
            src = np.ascontiguousarray(src.reshape(src.shape[:2]))
        self.shape = src.shape[:2]
        self._src = cv2.UMat(src)
        h, w = self.shape
        # outputs must be pre-sized; an empty dst UMat is reallocated in a temporary copy
        self._gray = cv2.UMat(h, w, cv2.CV_8UC1)
        self._blur = cv2.UMat(h, w, cv2.CV_8UC1)
        self._edges = cv2.UMat(h, w, cv2.CV_8UC1)
        self._warm = False
        self._pending = False
        self._closed = False

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return False

    def _check_open(self):
        if self._closed:
            raise RuntimeError("DeviceBuffers used after close()")

    def _stages(self):
        if self._code is None:
            gray = self._src
        else:
            cv2.cvtColor(self._src, self._code, self._gray)
            gray = self._gray
        cv2.GaussianBlur(gray, BLUR_KSIZE, BLUR_SIGMA, self._blur, 0, BORDER)
        cv2.Canny(self._blur, CANNY_LOW, CANNY_HIGH, self._edges, CANNY_APERTURE, CANNY_L2)

    def warm_up(self):
        self._check_open()
        self._stages()
        self._ocl.finish()
        self._warm = True

    def run(self):
        self._check_open()
        if not self._warm:
            raise RuntimeError("DeviceBuffers.run() called before warm_up()")
        self._pending = True
        self._stages()

    def finish(self):
        """Synchronization barrier: wait for all enqueued device work."""
        self._check_open()
        self._ocl.finish()
        self._pending = False

    def edges(self) -> np.ndarray:
        self._check_open()
        if not self._warm:
            raise RuntimeError("no device result yet; call warm_up() first")
        if self._pending:
            raise RuntimeError("device work still in flight; call finish() before reading results")
        edges = self._edges.get()
        if edges is None or edges.shape[:2] != self.shape:
            raise RuntimeError(f"device edge map is missing or mis-shaped (expected {self.shape})")
        return edges

    def close(self):
        self._src = self._gray = self._blur = self._edges = None
        self._closed = True


# --------------------------------- comparison --------------------------------
def edge_agreement(a: np.ndarray, b: np.ndarray, tolerance: int = 1) -> float:
    """
    Fraction of edge pixels in either map that have an edge pixel in the other
    map within `tolerance` pixels. 1.0 when both maps are empty.
    """
    if a.shape != b.shape:
        raise ValueError(f"edge maps differ in shape: {a.shape} vs {b.shape}")
    ea = (a > 0).astype(np.uint8)
    eb = (b > 0).astype(np.uint8)
    n = int(ea.sum()) + int(eb.sum())
    if n == 0:
        return 1.0
    if tolerance > 0:
        k = np.ones((2 * tolerance + 1, 2 * tolerance + 1), np.uint8)
        near_a = cv2.dilate(ea, k)
        near_b = cv2.dilate(eb, k)
    else:
        near_a, near_b = ea, eb
    hits = int(np.count_nonzero(ea & near_b)) + int(np.count_nonzero(eb & near_a))
    return hits / n
