from typing import Optional

import numpy
from numpy import ndarray


def as_vector(x: Optional[ndarray], name: str) -> ndarray:
    if x is None:
        raise TypeError(f"{name} can't be None")
    vector = numpy.array(x, dtype=numpy.float64)
    if vector.ndim != 1:
        raise ValueError(f"{name} must be a one-dimensional vector")
    return vector


def check_same_length(x: ndarray, y: ndarray, name: str) -> None:
    if x.shape != y.shape:
        raise ValueError(f"{name} must have the same length as the initial guess")


def check_nonnegative(value: float, name: str) -> None:
    if not value >= 0:
        raise ValueError(f"{name} must be non-negative, got {value}")
