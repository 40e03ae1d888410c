"""
Generate synthetic benchmark inputs: a bright square centred on a dark
background, one PNG per requested size.

Example:
    edgebench-synth --outdir ./images --sizes 100x100,1920x1080,3840x2160
"""

import argparse
import sys
from pathlib import Path
from typing import Tuple

import cv2
import numpy as np
from PIL import Image, ImageDraw

DEFAULT_SIZES = "100x100,640x480,1920x1080"


def parse_size(text: str) -> Tuple[int, int]:
    """'WxH' -> (w, h)."""
    try:
        w, h = (int(v) for v in text.lower().split("x"))
    except ValueError:
        raise ValueError(f"size must look like WIDTHxHEIGHT, got {text!r}")
    if w <= 0 or h <= 0:
        raise ValueError(f"size must be positive, got {text!r}")
    return w, h


def square_box(w: int, h: int, fraction: float = 0.4):
    side = max(1, int(round(min(w, h) * fraction)))
    x0 = (w - side) // 2
    y0 = (h - side) // 2
    return x0, y0, x0 + side - 1, y0 + side - 1


def square_pil(w: int, h: int, fg=(255, 255, 255), bg=(0, 0, 0), box=None) -> Image.Image:
    img = Image.new("RGB", (w, h), color=bg)
    draw = ImageDraw.Draw(img)
    draw.rectangle(box or square_box(w, h), fill=fg)
    return img


def square_image(w: int, h: int, fg=(255, 255, 255), bg=(0, 0, 0), box=None) -> np.ndarray:
    """Same image as square_pil, as a BGR uint8 array ready for the pipeline."""
    rgb = np.asarray(square_pil(w, h, fg=fg, bg=bg, box=box))
    return cv2.cvtColor(rgb, cv2.COLOR_RGB2BGR)


def main(argv=None):
    parser = argparse.ArgumentParser(description="Write square-on-background PNGs for edgebench.")
    parser.add_argument("--outdir", type=str, default=".", help="Output directory (default: .).")
    parser.add_argument("--sizes", type=str, default=DEFAULT_SIZES,
                        help=f"Comma-separated WxH list (default: {DEFAULT_SIZES}).")
    parser.add_argument("--prefix", type=str, default="square", help="Filename prefix (default: square).")
    args = parser.parse_args(argv)

    try:
        sizes = [parse_size(s) for s in args.sizes.split(",") if s.strip()]
    except ValueError as e:
        parser.error(str(e))

    outdir = Path(args.outdir)
    outdir.mkdir(parents=True, exist_ok=True)
    for w, h in sizes:
        fname = outdir / f"{args.prefix}_{w}x{h}.png"
        square_pil(w, h).save(fname, format="PNG")
        print(f"Wrote {fname}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
