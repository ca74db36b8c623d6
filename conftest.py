"""Global pytest configuration and shared fixtures.

OpenCL-backed tests request ``compute_context``; it skips when no platform
with a double-precision device is present (install the ``test`` extra to
get the pocl CPU device).
"""

import logging
import os
import warnings
from pathlib import Path

import pytest

# Build kernels fresh every time so failed builds keep their per-device logs
# and nothing is written to the user's pyopencl cache.
os.environ.setdefault("PYOPENCL_NO_CACHE", "1")

warnings.filterwarnings("ignore", message=".*Non-empty compiler output.*")

FIXTURES_DIR = Path(__file__).resolve().parent / "tests" / "fixtures"

_COMPUTE_PROBE = {}


def _probe_compute():
    if "compute" not in _COMPUTE_PROBE:
        from clmatbench.accelerator import select_device
        from clmatbench.config import HarnessConfig
        from clmatbench.exceptions import DeviceOperationError

        try:
            compute = select_device(HarnessConfig())
        except DeviceOperationError as exc:
            _COMPUTE_PROBE["compute"] = None
            _COMPUTE_PROBE["reason"] = f"No OpenCL device: {exc}"
        else:
            if "cl_khr_fp64" not in compute.device.extensions:
                _COMPUTE_PROBE["compute"] = None
                _COMPUTE_PROBE["reason"] = f"{compute.device.name.strip()} lacks cl_khr_fp64"
            else:
                _COMPUTE_PROBE["compute"] = compute
    return _COMPUTE_PROBE["compute"]


@pytest.fixture(scope="session")
def compute_context():
    compute = _probe_compute()
    if compute is None:
        pytest.skip(_COMPUTE_PROBE.get("reason", "No OpenCL device"))
    return compute


@pytest.fixture
def fixture_kernels() -> Path:
    return FIXTURES_DIR


@pytest.fixture(autouse=True)
def _restore_root_logging():
    # The CLI replaces root handlers; put them back so later tests keep caplog.
    root = logging.getLogger()
    handlers = list(root.handlers)
    level = root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
