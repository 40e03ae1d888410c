"""Grayscale + Gaussian blur + Canny benchmark for OpenCV, CPU vs OpenCL (cv2.UMat)."""

__version__ = "0.1.0"
