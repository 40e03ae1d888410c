import os
import re
from dataclasses import dataclass

DEVICE_ENV = "OPENCV_OPENCL_DEVICE"

DEVICE_CLASSES = ("CPU", "GPU", "ACCELERATOR", "DGPU", "IGPU", "DEFAULT")

# <platform-name>:<device-class>:<index-or-empty>
RE_DEVICE_HINT = re.compile(r"^([^:]*):([A-Za-z]*):(\d*)$")


def parse_device_hint(value: str) -> str:
    """Validate an OPENCV_OPENCL_DEVICE style hint and return it normalized."""
    m = RE_DEVICE_HINT.match(value.strip())
    if not m:
        raise ValueError(f"device hint must look like <platform>:<type>:<index>, got {value!r}")
    platform, dev_class, index = m.groups()
    dev_class = dev_class.upper()
    if dev_class and dev_class not in DEVICE_CLASSES:
        raise ValueError(f"unknown device class {dev_class!r} (expect one of: {' '.join(DEVICE_CLASSES)})")
    return f"{platform}:{dev_class}:{index}"


@dataclass
class BackendConfig:
    """OpenCL backend settings, fixed before the first cv2.ocl call.

    ``initialized`` is flipped by the probe; after that the device hint can
    no longer be changed, since OpenCV only reads it once at context creation.
    """
    device_hint: str | None = None
    allow_opencl: bool = True
    hint_from_env: bool = False
    initialized: bool = False

    @classmethod
    def from_args(cls, device=None, cpu_only=False, environ=None):
        environ = os.environ if environ is None else environ
        if device:
            return cls(device_hint=parse_device_hint(device), allow_opencl=not cpu_only)
        existing = environ.get(DEVICE_ENV)
        return cls(device_hint=existing or None, allow_opencl=not cpu_only,
                   hint_from_env=bool(existing))

    def set_device_hint(self, value: str):
        if self.initialized:
            raise RuntimeError("device hint must be set before the OpenCL backend is initialized")
        self.device_hint = parse_device_hint(value)
        self.hint_from_env = False

    def apply(self, environ=None):
        """Export the device hint so OpenCV picks it up at context creation."""
        if self.initialized:
            raise RuntimeError("device hint must be applied before the OpenCL backend is initialized")
        environ = os.environ if environ is None else environ
        if self.device_hint is None:
            return
        if self.hint_from_env:
            print(f"[probe] using {DEVICE_ENV}={self.device_hint} from environment")
            return
        environ[DEVICE_ENV] = self.device_hint
        print(f"[probe] set {DEVICE_ENV}={self.device_hint}")

    def mark_initialized(self):
        self.initialized = True
