"""
edgebench: time grayscale -> GaussianBlur(7x7, 1.5) -> Canny(0, 50, L1) on
the CPU and, when OpenCV's OpenCL layer is usable, on cv2.UMat buffers.

Usage:
  edgebench path/to/img.jpg
  edgebench path/to/img.jpg --device NVIDIA:GPU:0 --check --csv out/times.csv
"""

import argparse
import sys
import traceback

from .config import BackendConfig
from .loader import ImageDecodeError, load_image
from .pipeline import DeviceBuffers, cpu_pipeline, edge_agreement
from .probe import probe
from .report import plot_results, write_csv
from .timing import time_it

PARITY_THRESHOLD = 0.9


def build_parser():
    ap = argparse.ArgumentParser(prog="edgebench",
                                 description="Benchmark grayscale+blur+canny on CPU and OpenCL (cv2.UMat).")
    ap.add_argument("image", help="Path to the input image")
    ap.add_argument("--device", default=None,
                    help="OpenCL device hint <platform>:<type>:<index>, e.g. 'NVIDIA:GPU:0' or ':CPU:' "
                         "(exported as OPENCV_OPENCL_DEVICE before OpenCL initializes)")
    ap.add_argument("--cpu-only", action="store_true", help="Never enable OpenCL; run the CPU loop only")
    ap.add_argument("--check", action="store_true",
                    help="Compare CPU and OpenCL edge maps after timing")
    ap.add_argument("--csv", default=None, help="Optional path to write a CSV of the timings")
    ap.add_argument("--plot", default=None, help="Optional path to write a bar chart PNG of the timings")
    return ap


def check_parity(img, device_edges):
    cpu_edges = cpu_pipeline(img)
    score = edge_agreement(cpu_edges, device_edges)
    print(f"[check] CPU vs OpenCL edge agreement: {score:.4f}")
    if score < PARITY_THRESHOLD:
        print(f"[warn] edge agreement below {PARITY_THRESHOLD}")
    return score


def main(argv=None) -> int:
    ap = build_parser()
    args = ap.parse_args(argv)

    try:
        config = BackendConfig.from_args(device=args.device, cpu_only=args.cpu_only)
    except ValueError as e:
        ap.error(str(e))

    # hint must land in the environment before cv2.ocl is touched
    config.apply()
    report = probe(config)

    try:
        img = load_image(args.image)
    except ImageDecodeError as e:
        print(f"[err] {e}", file=sys.stderr)
        return 1

    results = []
    print("[run] CPU pipeline...")
    results.append(time_it("CPU", lambda: cpu_pipeline(img)))
    print(results[-1].line())

    ran_device = report.enabled
    device_edges = None
    if ran_device:
        print("[run] OpenCL pipeline (warm-up, then timed)...")
        with DeviceBuffers(img) as bufs:
            bufs.warm_up()
            results.append(time_it("OpenCL", bufs.run, sync=bufs.finish))
            print(results[-1].line())
            if args.check:
                device_edges = bufs.edges()

    if args.check:
        if not ran_device:
            print("[check] skipped: OpenCL pipeline did not run")
        else:
            check_parity(img, device_edges)

    device_name = report.active.name if report.active else ""
    if args.csv:
        write_csv(args.csv, results, img.shape, device=device_name)
    if args.plot:
        plot_results(args.plot, results)
    return 0


def run():
    try:
        sys.exit(main())
    except SystemExit:
        raise  # let argparse exits propagate (shows usage/errors)
    except Exception:
        traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    run()
