import cv2
import pytest

from edgebench.config import DEVICE_ENV
from edgebench.probe import DeviceDescriptor, PlatformInfo
from edgebench.synth import square_image


class FakeDevice:
    def __init__(self, name="", version="", vendor=""):
        self._name, self._version, self._vendor = name, version, vendor

    def name(self):
        return self._name

    def version(self):
        return self._version

    def vendorName(self):
        return self._vendor


class FakeOcl:
    """
    Stand-in for cv2.ocl. Like OpenCV, it reads the device hint from the
    environment once, on the first backend call, and never again.
    """

    def __init__(self, have=True, environ=None, devices=None, default_fails=False):
        self._have = have
        self._use = False
        self._environ = {} if environ is None else environ
        self._devices = devices if devices is not None else {
            "": FakeDevice("Fake GPU", "OpenCL 3.0", "FakeVendor"),
            "FakeCPU": FakeDevice("Fake CPU", "OpenCL 1.2", "FakeVendor"),
        }
        self._selected = None
        self._default_fails = default_fails
        self.finish_calls = 0
        self.calls = []
        outer = self

        class Device:
            @staticmethod
            def getDefault():
                return outer._default()

        self.Device = Device

    def _init(self):
        if self._selected is None:
            hint = self._environ.get(DEVICE_ENV, "")
            platform = hint.split(":")[0]
            self._selected = self._devices.get(platform, self._devices.get("", FakeDevice()))

    def _default(self):
        if self._default_fails:
            raise cv2.error("no default device")
        self._init()
        return self._selected if self._have and self._use else FakeDevice()

    def haveOpenCL(self):
        self.calls.append("haveOpenCL")
        self._init()
        return self._have

    def setUseOpenCL(self, flag):
        self.calls.append(("setUseOpenCL", bool(flag)))
        self._use = bool(flag) and self._have

    def useOpenCL(self):
        return self._use

    def finish(self):
        self.finish_calls += 1


def fake_platforms():
    return [
        PlatformInfo(name="FakePlatform", devices=(
            DeviceDescriptor("FakePlatform", "Fake GPU", "OpenCL 3.0", 0, 0),
            DeviceDescriptor("FakePlatform", "Fake CPU", "OpenCL 1.2", 0, 1),
        )),
        PlatformInfo(name="EmptyPlatform", devices=()),
    ]


@pytest.fixture
def make_ocl():
    return FakeOcl


@pytest.fixture
def square():
    """100x100 BGR image, white 40x40 square centred on black."""
    return square_image(100, 100)


@pytest.fixture
def clean_env(monkeypatch):
    # setenv first so monkeypatch restores the original state, even if main() exports a hint
    monkeypatch.setenv(DEVICE_ENV, "")
    monkeypatch.delenv(DEVICE_ENV)


@pytest.fixture
def platforms():
    return fake_platforms
