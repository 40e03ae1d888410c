import csv
from pathlib import Path

import numpy as np

import matplotlib
matplotlib.use("Agg")

import matplotlib.pyplot as plt

CSV_FIELDS = ["label", "iterations", "total_ms", "avg_ms", "width", "height", "device"]

BACKEND_COLOR = {
    "CPU":    "C1",
    "OpenCL": "C0",
}


# ------------------------------------ csv ------------------------------------
def write_csv(path, results, shape, device=""):
    """One row per timed pipeline variant."""
    csv_path = Path(path)
    csv_path.parent.mkdir(parents=True, exist_ok=True)
    h, w = shape[:2]
    with open(csv_path, "w", newline="") as f:
        writer = csv.DictWriter(f, fieldnames=CSV_FIELDS)
        writer.writeheader()
        for r in results:
            writer.writerow({
                "label": r.label,
                "iterations": r.iterations,
                "total_ms": f"{r.total_ms:.6f}",
                "avg_ms": f"{r.average_ms:.6f}",
                "width": w, "height": h,
                "device": device if r.label != "CPU" else "",
            })
    print(f"[csv] wrote {csv_path}")
    return csv_path


# ----------------------------------- plot ------------------------------------
def plot_results(path, results, title="grayscale+blur+canny"):
    if not results:
        print("[plot] no data to plot")
        return None

    labels = [r.label for r in results]
    means = [r.average_ms for r in results]
    colors = [BACKEND_COLOR.get(lbl, "C7") for lbl in labels]

    n = len(labels)
    max_label_len = max((len(s) for s in labels), default=10)
    width_in = max(8.0, 0.8 * n + 0.35 * max_label_len)
    height_in = max(3.0, 0.6 * n + 1.5)
    dpi = 130

    fig, ax = plt.subplots(figsize=(width_in, height_in), dpi=dpi)
    y = np.arange(n)
    ax.barh(y, means, color=colors)

    # top = first variant
    ax.invert_yaxis()
    ax.set_yticks(y, labels)
    ax.set_xlabel("time per iteration (ms)")
    ax.set_title(f"{title}: average of {results[0].iterations} iterations")

    xmax = max(means) if means else 1.0
    ax.set_xlim(0, xmax * 1.30)
    offset = 0.01 * xmax
    for yi, m in enumerate(means):
        ax.text(m + offset, yi, f"{m:.3f} ms", va="center", fontsize=9)

    fig.tight_layout()
    out_path = Path(path)
    out_path.parent.mkdir(parents=True, exist_ok=True)
    fig.savefig(out_path, dpi=dpi, bbox_inches="tight", pad_inches=0.2)
    plt.close(fig)
    print(f"[plot] wrote {out_path}")
    return out_path
