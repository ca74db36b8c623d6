"""clmatbench command line entry point (Typer).

Invoked with no arguments it runs the fixed-size comparison and prints the
three summary lines. The optional flags only redirect the kernel source and
logging; the matrix size is not configurable here.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Optional

import typer
from rich.console import Console

from clmatbench.config import HarnessConfig
from clmatbench.exceptions import EXIT_FAILURE, ConfigurationError
from clmatbench.logger import get_logger, setup_logging
from clmatbench.outcome import BuildFailure, Success

logger = get_logger(__name__)

app = typer.Typer(add_completion=False, help="Naive CPU vs OpenCL matrix multiplication benchmark")


class LogFormat(str, Enum):
    text = "text"
    json = "json"


@app.command()
def run(
    kernel: Optional[Path] = typer.Option(
        None, "--kernel", envvar="CLMATBENCH_KERNEL_PATH", help="Path to the OpenCL kernel source"
    ),
    log_level: Optional[str] = typer.Option(
        None, "--log-level", envvar="CLMATBENCH_LOG_LEVEL", help="DEBUG, INFO, WARNING or ERROR"
    ),
    log_file: Optional[Path] = typer.Option(
        None, "--log-file", envvar="CLMATBENCH_LOG_FILE", help="Also write logs to this file"
    ),
    log_format: Optional[LogFormat] = typer.Option(
        None, "--log-format", envvar="CLMATBENCH_LOG_FORMAT", help="Log file format"
    ),
) -> None:
    """Multiply two random matrices on the CPU and on the OpenCL device and compare."""
    from clmatbench.harness import run_comparison
    
    try:
        config = HarnessConfig.from_env()
    except ConfigurationError as exc:
        setup_logging()
        logger.error(f"Invalid configuration: {exc}")
        raise typer.Exit(code=EXIT_FAILURE)
    if kernel is not None:
        config.kernel_path = kernel
    if log_level is not None:
        config.log_level = log_level
    if log_file is not None:
        config.log_file = log_file
    if log_format is not None:
        config.log_format = log_format.value
    
    setup_logging(level=config.log_level, log_file=config.log_file, log_format=config.log_format)
    logger.debug(f"Configuration: {config.to_dict()}")
    
    outcome = run_comparison(config)
    
    if isinstance(outcome, Success):
        console = Console(highlight=False, markup=False, soft_wrap=True)
        for line in outcome.report.lines():
            console.print(line)
    elif isinstance(outcome, BuildFailure):
        logger.error(outcome.diagnostic())
    
    if outcome.exit_code != 0:
        raise typer.Exit(code=outcome.exit_code)


def main() -> None:
    app()


if __name__ == "__main__":
    main()
