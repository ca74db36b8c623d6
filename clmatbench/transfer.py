"""Host/device data movement and the timed accelerator pipeline."""

from __future__ import annotations

from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

import numpy as np
import pyopencl as cl

from clmatbench.accelerator import AcceleratorSession, ComputeContext, platform_error_code
from clmatbench.exceptions import DeviceOperationError
from clmatbench.logger import get_logger, log_stage_complete, log_stage_start
from clmatbench.models import TimingSample
from clmatbench.timing import Stopwatch
from clmatbench.workload import Workload

logger = get_logger(__name__)


@contextmanager
def device_errors(action: str) -> Iterator[None]:
    """Re-raise any ``pyopencl.Error`` as ``DeviceOperationError``."""
    try:
        yield
    except cl.Error as exc:
        raise DeviceOperationError(
            f"{action} failed: {exc}",
            code=platform_error_code(exc),
            routine=getattr(exc, "routine", None),
        ) from exc


@dataclass
class DeviceBuffers:
    """Device storage mirroring A, B and the result."""
    a: cl.Buffer
    b: cl.Buffer
    result: cl.Buffer
    
    def release(self) -> None:
        for name in ("a", "b", "result"):
            try:
                getattr(self, name).release()
            except cl.Error as exc:
                logger.warning(f"Releasing buffer {name} failed: {exc}")


def write_buffer(compute: ComputeContext, buffer: cl.Buffer, host: np.ndarray) -> None:
    """Blocking host -> device copy."""
    with device_errors("Host to device copy"):
        cl.enqueue_copy(compute.queue, buffer, host, is_blocking=True)


def read_buffer(compute: ComputeContext, buffer: cl.Buffer, host: np.ndarray) -> None:
    """Blocking device -> host copy into ``host``."""
    with device_errors("Device to host copy"):
        cl.enqueue_copy(compute.queue, host, buffer, is_blocking=True)


class DataTransferPipeline:
    """Allocate, upload, launch, drain and read back for one kernel run."""
    
    def __init__(self, session: AcceleratorSession) -> None:
        if session.compute is None:
            raise RuntimeError("AcceleratorSession has no device selected")
        self.session = session
        self.compute = session.compute
    
    def allocate(self, size: int) -> DeviceBuffers:
        nbytes = size * size * np.dtype(np.float64).itemsize
        mf = cl.mem_flags
        context = self.compute.context
        with device_errors("Buffer allocation"):
            buf_a = cl.Buffer(context, mf.READ_ONLY, size=nbytes)
            buf_b = cl.Buffer(context, mf.READ_ONLY, size=nbytes)
            buf_result = cl.Buffer(context, mf.READ_WRITE, size=nbytes)
        return DeviceBuffers(a=buf_a, b=buf_b, result=buf_result)
    
    def upload(self, buffers: DeviceBuffers, workload: Workload) -> None:
        write_buffer(self.compute, buffers.a, workload.a)
        write_buffer(self.compute, buffers.b, workload.b)
        # Zeroed result gives the device a known initial state
        write_buffer(self.compute, buffers.result, workload.result_gpu)
    
    def launch(self, buffers: DeviceBuffers, size: int) -> None:
        with device_errors("Kernel enqueue"):
            self.session.run_kernel(buffers.a, buffers.b, buffers.result, size)
    
    def finish(self) -> None:
        with device_errors("Queue finish"):
            self.compute.queue.finish()
    
    def download(self, buffers: DeviceBuffers, workload: Workload) -> None:
        # Inputs are read back as well, so the timed window covers all three copies
        read_buffer(self.compute, buffers.a, workload.a)
        read_buffer(self.compute, buffers.b, workload.b)
        read_buffer(self.compute, buffers.result, workload.result_gpu)
    
    def run(self, workload: Workload) -> TimingSample:
        """Run the full pipeline and fill ``workload.result_gpu``.
        
        The timed window opens before buffer allocation and closes after
        the last read-back; kernel compilation is outside it. Buffers are
        released whether or not the pipeline succeeds.
        
        Raises:
            DeviceOperationError: Any device-side failure
        """
        size = workload.dimension
        log_stage_start(logger, "accelerator", f"{size * size} work-items")
        buffers = None
        watch = Stopwatch()
        watch.start()
        try:
            buffers = self.allocate(size)
            self.upload(buffers, workload)
            self.launch(buffers, size)
            self.finish()
            self.download(buffers, workload)
            sample = watch.stop()
        finally:
            if buffers is not None:
                buffers.release()
        log_stage_complete(logger, "accelerator", sample.elapsed_ms)
        return sample
