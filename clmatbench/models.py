"""Pydantic models for timing measurements and the comparison report.

All models include schemaVersion for forward compatibility.
"""

from __future__ import annotations

import math
from typing import List

from pydantic import BaseModel, ConfigDict, Field, model_validator


class TimingSample(BaseModel):
    """One (start, end) pair read from ``time.perf_counter()``."""
    
    start_s: float = Field(..., description="Start instant in seconds (perf_counter)")
    end_s: float = Field(..., description="End instant in seconds (perf_counter)")
    
    schemaVersion: str = Field("1.0", description="Schema version for forward compatibility")
    
    model_config = ConfigDict(frozen=True)
    
    @model_validator(mode="after")
    def _check_order(self) -> TimingSample:
        if self.end_s < self.start_s:
            raise ValueError(f"end_s ({self.end_s}) precedes start_s ({self.start_s})")
        return self
    
    @property
    def elapsed_ms(self) -> float:
        """Elapsed time in fractional milliseconds."""
        return (self.end_s - self.start_s) * 1000.0


class ComparisonReport(BaseModel):
    """Reference vs accelerator timings for one run."""
    
    dimension: int = Field(..., gt=0, description="Matrix dimension N")
    cpu_time_ms: float = Field(..., ge=0.0, description="Reference (host) elapsed time in milliseconds")
    gpu_time_ms: float = Field(..., ge=0.0, description="Accelerator pipeline elapsed time in milliseconds")
    speedup: float = Field(..., description="cpu_time_ms / gpu_time_ms")
    
    schemaVersion: str = Field("1.0", description="Schema version for forward compatibility")
    
    model_config = ConfigDict(
        json_schema_extra={
            "example": {
                "dimension": 512,
                "cpu_time_ms": 41250.0,
                "gpu_time_ms": 12.5,
                "speedup": 3300.0,
                "schemaVersion": "1.0"
            }
        }
    )
    
    @property
    def rounded_speedup(self) -> str:
        if math.isinf(self.speedup):
            return "inf"
        return f"{self.speedup:.0f}"
    
    def lines(self) -> List[str]:
        """The three human-readable summary lines."""
        size = f"{self.dimension}*{self.dimension}"
        return [
            f"The computational time for a {size} matrix multiplication on the CPU: {self.cpu_time_ms:.3f} millisec.",
            f"The computational time for a {size} matrix multiplication on the GPU: {self.gpu_time_ms:.3f} millisec.",
            f"The GPU proves to be {self.rounded_speedup} times faster.",
        ]
