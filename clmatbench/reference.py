"""Host reference: the unoptimised triple-loop matrix product.

The loops run over plain Python lists of floats (IEEE doubles) with no
vectorisation or parallelism, so the cost is sequential arithmetic plus the
row-major access pattern. List conversion happens outside the timed window.
"""

from __future__ import annotations

import numpy as np

from clmatbench.logger import get_logger, log_stage_complete, log_stage_start
from clmatbench.models import TimingSample
from clmatbench.timing import Stopwatch

logger = get_logger(__name__)


def _triple_loop(a: list, b: list, c: list, size: int) -> None:
    for i in range(size):
        for j in range(size):
            acc = 0.0
            for k in range(size):
                acc += a[i * size + k] * b[k * size + j]
            c[i * size + j] = acc


def multiply_reference(a: np.ndarray, b: np.ndarray, size: int, out: np.ndarray) -> TimingSample:
    """Compute ``out = a @ b`` for flat row-major N*N matrices.
    
    Args:
        a: Left operand, length size*size
        b: Right operand, length size*size
        size: Matrix dimension N
        out: Result storage, written once
    
    Returns:
        TimingSample spanning only the loop nest
    """
    expected = size * size
    if a.size != expected or b.size != expected or out.size != expected:
        raise ValueError(f"operands must all hold {expected} elements")
    
    a_list = a.tolist()
    b_list = b.tolist()
    c_list = [0.0] * expected
    
    log_stage_start(logger, "reference", f"{size}x{size} triple loop")
    watch = Stopwatch()
    watch.start()
    _triple_loop(a_list, b_list, c_list, size)
    sample = watch.stop()
    log_stage_complete(logger, "reference", sample.elapsed_ms)
    
    out[:] = c_list
    return sample
