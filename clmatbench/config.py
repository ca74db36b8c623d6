"""Harness configuration.

A single ``HarnessConfig`` is built once at process start (usually through
``HarnessConfig.from_env()`` in the CLI) and handed explicitly to every stage.
There is no module-level default instance.
"""

from __future__ import annotations

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional

from clmatbench.exceptions import ConfigurationError

MATRIX_SIZE = 512
KERNEL_NAME = "matmul"
DEFAULT_KERNEL_PATH = Path(__file__).resolve().parent / "kernels" / "matmul.cl"

ENV_PREFIX = "CLMATBENCH_"
LOG_FORMATS = ("text", "json")


def _env_int(name: str) -> Optional[int]:
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return None
    try:
        return int(raw)
    except ValueError as exc:
        raise ConfigurationError(
            f"{name} must be an integer, got {raw!r}",
            config_key=name,
            config_value=raw,
            reason="not an integer",
        ) from exc


@dataclass
class HarnessConfig:
    """Configuration for one comparison run.
    
    ``dimension`` is fixed at ``MATRIX_SIZE`` for real runs; it is a field so
    tests can drive the harness with small matrices.
    """
    
    # Workload
    dimension: int = MATRIX_SIZE
    
    # Kernel source
    kernel_path: Path = field(default_factory=lambda: DEFAULT_KERNEL_PATH)
    kernel_name: str = KERNEL_NAME
    
    # Device selection (None -> platform default)
    platform_index: Optional[int] = None
    device_index: Optional[int] = None
    prefer_gpu: bool = True
    
    # Logging
    log_level: str = "INFO"
    log_file: Optional[Path] = None
    log_format: str = "text"  # "text" or "json"
    
    def __post_init__(self) -> None:
        self.kernel_path = Path(self.kernel_path)
        if self.log_file is not None:
            self.log_file = Path(self.log_file)
    
    @classmethod
    def from_env(cls) -> HarnessConfig:
        """Create a config from ``CLMATBENCH_*`` environment variables.
        
        Unset variables keep their defaults. The matrix dimension is not
        read from the environment.
        """
        config = cls()
        kernel_path = os.environ.get(f"{ENV_PREFIX}KERNEL_PATH")
        if kernel_path:
            config.kernel_path = Path(kernel_path)
        kernel_name = os.environ.get(f"{ENV_PREFIX}KERNEL_NAME")
        if kernel_name:
            config.kernel_name = kernel_name
        config.platform_index = _env_int(f"{ENV_PREFIX}PLATFORM")
        config.device_index = _env_int(f"{ENV_PREFIX}DEVICE")
        log_level = os.environ.get(f"{ENV_PREFIX}LOG_LEVEL")
        if log_level:
            config.log_level = log_level
        log_file = os.environ.get(f"{ENV_PREFIX}LOG_FILE")
        if log_file:
            config.log_file = Path(log_file)
        log_format = os.environ.get(f"{ENV_PREFIX}LOG_FORMAT")
        if log_format:
            config.log_format = log_format
        return config
    
    def validate(self) -> HarnessConfig:
        """Raise ``ConfigurationError`` on the first invalid field."""
        if not isinstance(self.dimension, int) or self.dimension <= 0:
            raise ConfigurationError(
                f"Matrix dimension must be a positive integer, got {self.dimension!r}",
                config_key="dimension",
                config_value=self.dimension,
                reason="must be > 0",
            )
        if not self.kernel_name:
            raise ConfigurationError(
                "Kernel entry point name must not be empty",
                config_key="kernel_name",
                config_value=self.kernel_name,
                reason="empty",
            )
        for key in ("platform_index", "device_index"):
            value = getattr(self, key)
            if value is not None and value < 0:
                raise ConfigurationError(
                    f"{key} must be >= 0, got {value}",
                    config_key=key,
                    config_value=value,
                    reason="negative index",
                )
        if self.log_format not in LOG_FORMATS:
            raise ConfigurationError(
                f"log_format must be one of {LOG_FORMATS}, got {self.log_format!r}",
                config_key="log_format",
                config_value=self.log_format,
                reason="unknown format",
            )
        return self
    
    def to_dict(self) -> dict:
        """Convert config to dictionary."""
        return {
            "dimension": self.dimension,
            "kernel_path": str(self.kernel_path),
            "kernel_name": self.kernel_name,
            "platform_index": self.platform_index,
            "device_index": self.device_index,
            "prefer_gpu": self.prefer_gpu,
            "log_level": self.log_level,
            "log_file": str(self.log_file) if self.log_file else None,
            "log_format": self.log_format,
        }
