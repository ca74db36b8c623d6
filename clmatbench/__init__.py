"""clmatbench - naive CPU vs OpenCL matrix multiplication benchmark."""

from clmatbench.config import MATRIX_SIZE, HarnessConfig
from clmatbench.harness import run_comparison
from clmatbench.outcome import RunOutcome, Success

__all__ = ["MATRIX_SIZE", "HarnessConfig", "RunOutcome", "Success", "run_comparison"]

__version__ = "0.1.0"
