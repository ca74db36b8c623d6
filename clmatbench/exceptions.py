"""Custom exception hierarchy for the comparison run.

Every failure mode of the run has its own exception type so the top-level
run function can turn each one into a distinct outcome and exit status.
"""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

EXIT_FAILURE = 1


class HarnessError(Exception):
    """Base exception for all harness-related errors."""
    pass


class KernelSourceNotFoundError(HarnessError):
    """Raised when the kernel source file cannot be opened or read.
    
    Attributes:
        path: Path that was requested
    """
    
    def __init__(self, path: Path, reason: Optional[str] = None):
        message = f"Cannot open kernel source: {Path(path).name}"
        if reason:
            message = f"{message} ({reason})"
        super().__init__(message)
        self.path = Path(path)
        self.reason = reason


class KernelBuildError(HarnessError):
    """Raised when the OpenCL compiler rejects the kernel source.
    
    Attributes:
        code: Platform error code (e.g. -11 for CL_BUILD_PROGRAM_FAILURE)
        logs: Compiler diagnostics keyed by device name
    """
    
    def __init__(self, message: str, code: int, logs: Dict[str, str]):
        super().__init__(message)
        self.code = code
        self.logs = dict(logs)


class DeviceOperationError(HarnessError):
    """Raised when a device-side call fails.
    
    Covers buffer allocation, host/device copies, kernel enqueue and
    queue synchronisation.
    
    Attributes:
        code: Platform error code
        routine: OpenCL routine that reported the failure, if known
    """
    
    def __init__(self, message: str, code: int, routine: Optional[str] = None):
        super().__init__(message)
        self.code = code
        self.routine = routine


class DeviceUnavailableError(DeviceOperationError):
    """Raised when no OpenCL platform or device can be selected."""
    pass


class EntryPointMissingError(DeviceOperationError):
    """Raised when the compiled program has no kernel with the requested name.
    
    Attributes:
        kernel_name: Entry point that was looked up
    """
    
    def __init__(self, message: str, code: int, kernel_name: str, routine: Optional[str] = None):
        super().__init__(message, code, routine)
        self.kernel_name = kernel_name


class ConfigurationError(HarnessError):
    """Raised when harness configuration is invalid.
    
    Attributes:
        config_key: Configuration key that is invalid
        config_value: Invalid value
        reason: Reason for invalidity
    """
    
    def __init__(
        self,
        message: str,
        config_key: str,
        config_value: Any,
        reason: str,
    ):
        super().__init__(message)
        self.config_key = config_key
        self.config_value = config_value
        self.reason = reason
