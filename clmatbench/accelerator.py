"""OpenCL device session: device selection, kernel build and entry-point binding.

The session never touches a process-wide default queue. The selected
context, queue and device live in an explicit ``ComputeContext`` that is
created once and handed to the transfer pipeline.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Dict, Iterable, List, Optional

import numpy as np
import pyopencl as cl

from clmatbench.config import HarnessConfig
from clmatbench.exceptions import (
    EXIT_FAILURE,
    DeviceUnavailableError,
    EntryPointMissingError,
    KernelBuildError,
    KernelSourceNotFoundError,
)
from clmatbench.logger import get_logger

logger = get_logger(__name__)

# (A, B, result, N): buffers are passed through, N is converted to int32
KERNEL_ARG_DTYPES = [None, None, None, np.int32]


def platform_error_code(exc: BaseException) -> int:
    """Numeric OpenCL status carried by a ``pyopencl.Error``."""
    try:
        return int(exc.code)  # type: ignore[attr-defined]
    except (AttributeError, IndexError, TypeError, ValueError):
        return EXIT_FAILURE


def device_label(device: cl.Device) -> str:
    return device.name.strip()


@dataclass
class ComputeContext:
    """The device, its context and the single in-order queue used for a run."""
    device: cl.Device
    context: cl.Context
    queue: cl.CommandQueue
    
    @classmethod
    def for_device(cls, device: cl.Device) -> ComputeContext:
        context = cl.Context([device])
        return cls(device=device, context=context, queue=cl.CommandQueue(context, device))
    
    def describe(self) -> Dict[str, str]:
        return {
            "device": device_label(self.device),
            "platform": self.device.platform.name.strip(),
            "version": self.device.version.strip(),
        }


def _devices(platform: cl.Platform, device_type: int) -> List[cl.Device]:
    try:
        return list(platform.get_devices(device_type=device_type))
    except cl.Error:
        # DEVICE_NOT_FOUND for this type on this platform
        return []


def _pick_default(platforms: Iterable[cl.Platform], prefer_gpu: bool) -> Optional[cl.Device]:
    platforms = list(platforms)
    if prefer_gpu:
        for platform in platforms:
            gpus = _devices(platform, cl.device_type.GPU)
            if gpus:
                return gpus[0]
    for platform in platforms:
        devices = _devices(platform, cl.device_type.ALL)
        if devices:
            return devices[0]
    return None


def select_device(config: HarnessConfig) -> ComputeContext:
    """Select the OpenCL device for this run.
    
    Explicit ``platform_index``/``device_index`` win; otherwise the first GPU
    (when ``prefer_gpu``) or the first device of any type is used.
    
    Raises:
        DeviceUnavailableError: No platform or no matching device
    """
    try:
        platforms = cl.get_platforms()
    except cl.Error as exc:
        raise DeviceUnavailableError(
            f"No OpenCL platform available: {exc}",
            code=platform_error_code(exc),
            routine="clGetPlatformIDs",
        ) from exc
    if not platforms:
        raise DeviceUnavailableError(
            "No OpenCL platform available",
            code=cl.status_code.DEVICE_NOT_FOUND,
            routine="clGetPlatformIDs",
        )
    
    device: Optional[cl.Device]
    if config.platform_index is not None or config.device_index is not None:
        platform_index = config.platform_index or 0
        device_index = config.device_index or 0
        if platform_index >= len(platforms):
            raise DeviceUnavailableError(
                f"Platform index {platform_index} out of range ({len(platforms)} platforms)",
                code=cl.status_code.DEVICE_NOT_FOUND,
                routine="clGetPlatformIDs",
            )
        devices = _devices(platforms[platform_index], cl.device_type.ALL)
        device = devices[device_index] if device_index < len(devices) else None
    else:
        device = _pick_default(platforms, config.prefer_gpu)
    
    if device is None:
        raise DeviceUnavailableError(
            "No OpenCL device available",
            code=cl.status_code.DEVICE_NOT_FOUND,
            routine="clGetDeviceIDs",
        )
    return ComputeContext.for_device(device)


class AcceleratorSession:
    """Prepares the ``matmul`` kernel on one device.
    
    ``open()`` runs the four steps in order (select device, load source,
    compile, bind); each can also be called on its own. Any failure is
    raised and never retried.
    """
    
    def __init__(self, config: HarnessConfig, compute: Optional[ComputeContext] = None) -> None:
        self.config = config
        self.compute = compute
        self.source: Optional[str] = None
        self.program: Optional[cl.Program] = None
        self.kernel: Optional[cl.Kernel] = None
    
    def __enter__(self) -> AcceleratorSession:
        return self.open()
    
    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
    
    # ------------------------------------------------------------------ Steps
    def select_device(self) -> ComputeContext:
        if self.compute is None:
            self.compute = select_device(self.config)
        info = self.compute.describe()
        logger.info(f"Using device {info['device']} on {info['platform']} ({info['version']})")
        return self.compute
    
    def load_source(self) -> str:
        path = Path(self.config.kernel_path)
        try:
            self.source = path.read_text()
        except (OSError, UnicodeDecodeError) as exc:
            raise KernelSourceNotFoundError(path, reason=exc.__class__.__name__) from exc
        logger.debug(f"Loaded kernel source {path} ({len(self.source)} bytes)")
        return self.source
    
    def compile(self, source: Optional[str] = None) -> cl.Program:
        compute = self._require_compute()
        source = source if source is not None else self.source
        if source is None:
            raise RuntimeError("Kernel source not loaded (load_source() missing)")
        program = cl.Program(compute.context, source)
        try:
            program.build(devices=[compute.device])
        except cl.Error as exc:
            logs = _collect_build_logs(program, [compute.device], exc)
            raise KernelBuildError(
                f"Kernel build failed: {exc.__class__.__name__}",
                code=platform_error_code(exc),
                logs=logs,
            ) from exc
        self.program = program
        return program
    
    def bind(self) -> cl.Kernel:
        if self.program is None:
            raise RuntimeError("Program not built (compile() missing)")
        name = self.config.kernel_name
        try:
            kernel = cl.Kernel(self.program, name)
        except cl.Error as exc:
            raise EntryPointMissingError(
                f"Kernel entry point '{name}' not found in compiled program",
                code=platform_error_code(exc),
                kernel_name=name,
                routine="clCreateKernel",
            ) from exc
        kernel.set_scalar_arg_dtypes(KERNEL_ARG_DTYPES)
        self.kernel = kernel
        return kernel
    
    def open(self) -> AcceleratorSession:
        self.select_device()
        self.load_source()
        self.compile()
        self.bind()
        return self
    
    # ------------------------------------------------------------------ Kernel API
    def run_kernel(self, buf_a: cl.Buffer, buf_b: cl.Buffer, buf_result: cl.Buffer, size: int) -> cl.Event:
        """Enqueue one ``matmul`` launch over N*N work-items (1-D, no local size)."""
        if self.kernel is None:
            raise RuntimeError("Kernel not bound (bind() missing)")
        compute = self._require_compute()
        return self.kernel(compute.queue, (size * size,), None, buf_a, buf_b, buf_result, size)
    
    def close(self) -> None:
        """Drain the queue and drop the kernel and program.
        
        pyopencl has no explicit release for programs or kernels; the
        underlying clReleaseKernel/clReleaseProgram run when the last Python
        reference goes away, so the session must be the only holder.
        """
        if self.kernel is not None and self.compute is not None:
            self.compute.queue.finish()
        self.kernel = None
        self.program = None
    
    def _require_compute(self) -> ComputeContext:
        if self.compute is None:
            raise RuntimeError("No device selected (select_device() missing)")
        return self.compute


def _collect_build_logs(program: cl.Program, devices: Iterable[cl.Device], error: cl.Error) -> Dict[str, str]:
    """Per-device compiler output; falls back to the error text when a log is empty."""
    logs: Dict[str, str] = {}
    for device in devices:
        try:
            log = program.get_build_info(device, cl.program_build_info.LOG)
        except cl.Error:
            log = ""
        logs[device_label(device)] = (log or "").strip() or str(error)
    return logs
