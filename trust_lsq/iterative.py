# -*- coding: utf-8 -*-


import logging
from typing import Optional, Tuple

import numpy
from numpy import ndarray

from trust_lsq._internals.common.checks import as_vector
from trust_lsq.stop_criteria import IterationStatus, Iterator

_log = logging.getLogger(__name__)


def conjugate_gradient(
    A: ndarray,
    b: ndarray,
    x0: Optional[ndarray] = None,
    iterator: Optional[Iterator] = None,
) -> Tuple[ndarray, IterationStatus, int]:
    """
    共轭梯度法求解对称正定方程组 Ax = b
    何时停止完全由iterator决定，默认使用Iterator.create_default()
    返回 (x, 最终状态, 迭代次数)
    """
    if A is None:
        raise TypeError("the matrix can't be None")
    _b = as_vector(b, "b")
    _A = numpy.array(A, dtype=numpy.float64)
    (n,) = _b.shape
    if _A.shape != (n, n):
        raise ValueError(f"the matrix must be {n}x{n}, got {_A.shape}")
    x = numpy.zeros((n,)) if x0 is None else as_vector(x0, "x0")
    if x.shape != (n,):
        raise ValueError(f"the initial guess must have {n} entries")
    if iterator is None:
        iterator = Iterator.create_default()

    r = _b - _A @ x
    d = r.copy()
    rr = float(r @ r)
    iteration = 0
    status = iterator.determine_status(iteration, x, _b, r)
    while status in (IterationStatus.RUNNING, IterationStatus.INDETERMINATE):
        Ad = _A @ d
        dAd = float(d @ Ad)
        if dAd == 0:
            # r == 0 时d == 0，已经是精确解
            status = IterationStatus.CONVERGED
            break
        alpha = rr / dAd
        x = x + alpha * d
        r = r - alpha * Ad
        rr_next = float(r @ r)
        d = r + (rr_next / rr) * d
        rr = rr_next
        iteration += 1
        status = iterator.determine_status(iteration, x, _b, r)

    _log.debug("conjugate gradient stopped after %d iterations: %s", iteration, status.name)
    return x, status, iteration
