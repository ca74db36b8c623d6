"""Random square-matrix workload shared by both compute paths."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

import numpy as np

DTYPE = np.float64

# Smallest double strictly greater than -1.0; uniform() is half-open [low, high)
_LOW = float(np.nextafter(-1.0, 0.0))
_HIGH = 1.0


@dataclass
class Workload:
    """Flat row-major N*N matrices for one run.
    
    ``a`` and ``b`` are inputs; ``result_cpu`` and ``result_gpu`` are owned by
    the reference and accelerator paths respectively and start zeroed.
    """
    dimension: int
    a: np.ndarray
    b: np.ndarray
    result_cpu: np.ndarray
    result_gpu: np.ndarray
    
    def __post_init__(self) -> None:
        if self.dimension <= 0:
            raise ValueError(f"dimension must be positive, got {self.dimension}")
        expected = self.dimension * self.dimension
        for name in ("a", "b", "result_cpu", "result_gpu"):
            matrix = getattr(self, name)
            if matrix.ndim != 1 or matrix.size != expected:
                raise ValueError(
                    f"{name} must be a flat array of {expected} elements, got shape {matrix.shape}"
                )
    
    @classmethod
    def from_matrices(cls, a, b) -> Workload:
        """Build a workload from fixed inputs (2-D or flat, square)."""
        flat_a = np.ascontiguousarray(a, dtype=DTYPE).reshape(-1).copy()
        flat_b = np.ascontiguousarray(b, dtype=DTYPE).reshape(-1).copy()
        if flat_a.size != flat_b.size:
            raise ValueError(f"a and b differ in size ({flat_a.size} vs {flat_b.size})")
        dimension = int(round(flat_a.size ** 0.5))
        if dimension * dimension != flat_a.size:
            raise ValueError(f"{flat_a.size} elements is not a square matrix")
        return cls(
            dimension=dimension,
            a=flat_a,
            b=flat_b,
            result_cpu=zeroed(dimension),
            result_gpu=zeroed(dimension),
        )


def zeroed(dimension: int) -> np.ndarray:
    return np.zeros(dimension * dimension, dtype=DTYPE)


def random_matrix(rng: np.random.Generator, dimension: int) -> np.ndarray:
    """Uniform values on the open interval (-1, 1)."""
    return rng.uniform(_LOW, _HIGH, size=dimension * dimension).astype(DTYPE, copy=False)


def generate_workload(dimension: int, seed: Optional[int] = None) -> Workload:
    """Generate A, B with i.i.d. U(-1, 1) entries and two zeroed results.
    
    Args:
        dimension: Matrix dimension N
        seed: Fixed seed for tests; ``None`` draws fresh OS entropy so runs
            are only statistically comparable
    
    Returns:
        Workload with all four matrices populated
    """
    rng = np.random.default_rng(seed)
    a = random_matrix(rng, dimension)
    b = random_matrix(rng, dimension)
    return Workload(
        dimension=dimension,
        a=a,
        b=b,
        result_cpu=zeroed(dimension),
        result_gpu=zeroed(dimension),
    )
