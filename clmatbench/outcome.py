"""Discriminated result of one comparison run.

``run_comparison`` returns exactly one of these variants; each knows the
process exit status it maps to.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional, Union

from clmatbench.exceptions import EXIT_FAILURE
from clmatbench.models import ComparisonReport
from clmatbench.workload import Workload


def _status(code: int) -> int:
    # A zero platform code must not read as success
    return code if code != 0 else EXIT_FAILURE


@dataclass(frozen=True)
class Success:
    report: ComparisonReport
    workload: Optional[Workload] = field(default=None, repr=False, compare=False)
    kind: str = "success"
    
    @property
    def exit_code(self) -> int:
        return 0


@dataclass(frozen=True)
class SourceNotFound:
    path: Path
    message: str
    kind: str = "source_not_found"
    
    @property
    def exit_code(self) -> int:
        return EXIT_FAILURE


@dataclass(frozen=True)
class BuildFailure:
    code: int
    logs: Dict[str, str]
    message: str = "Kernel build failed"
    kind: str = "build_failure"
    
    @property
    def exit_code(self) -> int:
        return _status(self.code)
    
    def diagnostic(self) -> str:
        """Full per-device build log, in the form written to the error stream."""
        parts = [f"{self.message}({self.code})"]
        for device, log in self.logs.items():
            parts.append(f"\tBuild log for device: {device}\n\n{log}\n")
        return "\n".join(parts)


@dataclass(frozen=True)
class DeviceOperationFailure:
    code: int
    message: str
    kind: str = "device_operation_failure"
    
    @property
    def exit_code(self) -> int:
        return _status(self.code)


@dataclass(frozen=True)
class GenericRuntimeFailure:
    message: str
    kind: str = "generic_runtime_failure"
    
    @property
    def exit_code(self) -> int:
        return EXIT_FAILURE


RunOutcome = Union[Success, SourceNotFound, BuildFailure, DeviceOperationFailure, GenericRuntimeFailure]
