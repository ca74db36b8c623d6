"""Combine reference and accelerator timings into a single comparison."""

from __future__ import annotations

from clmatbench.models import ComparisonReport, TimingSample


def compute_speedup(cpu_time_ms: float, gpu_time_ms: float) -> float:
    """Speedup of the accelerator over the reference (cpu / gpu).
    
    A non-positive accelerator time gives ``inf`` when the reference took
    any time at all, and 1.0 when both are zero.
    """
    if gpu_time_ms <= 0:
        return float("inf") if cpu_time_ms > 0 else 1.0
    return cpu_time_ms / gpu_time_ms


def compare_timings(cpu_sample: TimingSample, gpu_sample: TimingSample, dimension: int) -> ComparisonReport:
    cpu_ms = cpu_sample.elapsed_ms
    gpu_ms = gpu_sample.elapsed_ms
    return ComparisonReport(
        dimension=dimension,
        cpu_time_ms=cpu_ms,
        gpu_time_ms=gpu_ms,
        speedup=compute_speedup(cpu_ms, gpu_ms),
    )
