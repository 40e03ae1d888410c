"""
OpenCL capability probe.

cv2.ocl only exposes the default device to Python, so platforms and devices
are listed through pyopencl. Listing and the active-device lookup are
diagnostic queries: a failure there prints a warning and the run goes on.
Everything else (haveOpenCL / setUseOpenCL / useOpenCL) is operational and
propagates.
"""

from dataclasses import dataclass, field
from typing import Callable, List, Optional

import cv2
import pyopencl as cl

from .config import BackendConfig

DIAGNOSTIC_ERRORS = (cv2.error, cl.Error, RuntimeError, OSError)


@dataclass(frozen=True)
class DeviceDescriptor:
    platform: str
    name: str
    version: str
    platform_index: int = 0
    index: int = 0


@dataclass(frozen=True)
class PlatformInfo:
    name: str
    devices: tuple


@dataclass
class ProbeReport:
    available: bool = False
    enabled: bool = False
    platforms: List[PlatformInfo] = field(default_factory=list)
    active: Optional[DeviceDescriptor] = None
    warnings: List[str] = field(default_factory=list)

    @property
    def devices(self):
        return [d for p in self.platforms for d in p.devices]


def list_platforms() -> List[PlatformInfo]:
    platforms = []
    for pi, p in enumerate(cl.get_platforms()):
        devices = tuple(
            DeviceDescriptor(platform=p.name.strip(), name=d.name.strip(),
                             version=d.version.strip(), platform_index=pi, index=di)
            for di, d in enumerate(p.get_devices())
        )
        platforms.append(PlatformInfo(name=p.name.strip(), devices=devices))
    return platforms


def active_device(ocl) -> Optional[DeviceDescriptor]:
    d = ocl.Device.getDefault()
    if d is None or not d.name():
        return None
    return DeviceDescriptor(platform=d.vendorName(), name=d.name(), version=d.version())


def diagnostic(report: ProbeReport, what: str, fn: Callable):
    """Run a best-effort query; failures become warnings on the report."""
    try:
        return fn()
    except DIAGNOSTIC_ERRORS as e:
        msg = f"{what} failed: {e}"
        print(f"[warn] {msg}")
        report.warnings.append(msg)
        return None


def print_platforms(platforms):
    for pi, p in enumerate(platforms):
        print(f"Platform #{pi}: {p.name}")
        for d in p.devices:
            print(f"  Device #{d.index}: {d.name} ({d.version})")


def probe(config: BackendConfig, ocl=None, lister=None) -> ProbeReport:
    ocl = cv2.ocl if ocl is None else ocl
    lister = list_platforms if lister is None else lister

    # from here on OpenCV may have created its context; the hint is frozen
    config.mark_initialized()

    report = ProbeReport()
    report.available = bool(ocl.haveOpenCL())
    ocl.setUseOpenCL(report.available and config.allow_opencl)

    if report.available:
        platforms = diagnostic(report, "platform listing", lister)
        if platforms:
            report.platforms = list(platforms)
            print_platforms(report.platforms)
        elif platforms is not None:
            print("[warn] no OpenCL platforms listed")
            report.warnings.append("no OpenCL platforms listed")

    report.enabled = bool(ocl.useOpenCL())
    print(f"OpenCL is {'en' if report.enabled else 'dis'}abled")

    if report.enabled:
        report.active = diagnostic(report, "active device lookup", lambda: active_device(ocl))
        if report.active is None:
            msg = "OpenCL enabled but no active device reported"
            print(f"[warn] {msg}")
            report.warnings.append(msg)
        else:
            a = report.active
            print(f"Active device: {a.name} ({a.version}), vendor {a.platform}")
    print()
    return report
