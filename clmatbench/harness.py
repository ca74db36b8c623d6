"""Top-level comparison run.

Order follows the original harness: prepare the accelerator session first
(so a missing or broken kernel aborts before any heavy work), then generate
the workload, time the reference loop, time the accelerator pipeline and
combine both timings. Every failure is converted into a ``RunOutcome``
variant here; nothing raises past ``run_comparison``.
"""

from __future__ import annotations

from typing import Optional

from clmatbench.accelerator import AcceleratorSession, ComputeContext
from clmatbench.comparison import compare_timings
from clmatbench.config import HarnessConfig
from clmatbench.exceptions import (
    DeviceOperationError,
    KernelBuildError,
    KernelSourceNotFoundError,
)
from clmatbench.logger import get_logger, log_stage_error
from clmatbench.outcome import (
    BuildFailure,
    DeviceOperationFailure,
    GenericRuntimeFailure,
    RunOutcome,
    SourceNotFound,
    Success,
)
from clmatbench.reference import multiply_reference
from clmatbench.transfer import DataTransferPipeline
from clmatbench.workload import Workload, generate_workload

logger = get_logger(__name__)


def _execute(
    config: HarnessConfig,
    compute: Optional[ComputeContext],
    workload: Optional[Workload],
) -> Success:
    config.validate()
    with AcceleratorSession(config, compute=compute) as session:
        if workload is None:
            workload = generate_workload(config.dimension)
        elif workload.dimension != config.dimension:
            raise ValueError(
                f"Workload dimension {workload.dimension} does not match configured {config.dimension}"
            )
        
        cpu_sample = multiply_reference(workload.a, workload.b, workload.dimension, workload.result_cpu)
        gpu_sample = DataTransferPipeline(session).run(workload)
    
    report = compare_timings(cpu_sample, gpu_sample, workload.dimension)
    return Success(report=report, workload=workload)


def run_comparison(
    config: HarnessConfig,
    *,
    compute: Optional[ComputeContext] = None,
    workload: Optional[Workload] = None,
) -> RunOutcome:
    """Run both paths once and return the outcome.
    
    Args:
        config: Harness configuration, built once by the caller
        compute: Pre-selected device context; selected from ``config`` if None
        workload: Fixed matrices; a random workload is generated if None
    
    Returns:
        ``Success`` with the report, or the failure variant for the first error
    """
    try:
        return _execute(config, compute, workload)
    except KernelSourceNotFoundError as exc:
        log_stage_error(logger, "kernel source", str(exc))
        return SourceNotFound(path=exc.path, message=str(exc))
    except KernelBuildError as exc:
        log_stage_error(logger, "kernel build", str(exc))
        return BuildFailure(code=exc.code, logs=exc.logs, message=str(exc))
    except DeviceOperationError as exc:
        log_stage_error(logger, "device operation", f"{exc} ({exc.code})")
        return DeviceOperationFailure(code=exc.code, message=str(exc))
    except Exception as exc:
        logger.debug("Unexpected failure", exc_info=True)
        log_stage_error(logger, "run", str(exc))
        return GenericRuntimeFailure(message=str(exc) or exc.__class__.__name__)
