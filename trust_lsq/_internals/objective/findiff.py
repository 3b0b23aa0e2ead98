# -*- coding: utf-8 -*-
from typing import Callable, Dict, List, Tuple

import numpy
from numpy import ndarray

"""
有限差分模板：(偏移量, 系数, 分母)
f'(x) ~ sum(coef * f(x + offset * h)) / (denom * h)

order 1: {-f(x) + f(x + h)} / h
order 2: {f(x + h) - f(x - h)} / 2h
order 3: {-11f(x) + 18f(x + h) - 9f(x + 2h) + 2f(x + 3h)} / 6h
order 4: {f(x - 2h) - 8f(x - h) + 8f(x + h) - f(x + 2h)} / 12h
order 5: {-137f(x) + 300f(x + h) - 300f(x + 2h) + 200f(x + 3h) - 75f(x + 4h) + 12f(x + 5h)} / 60h
order 6: {-f(x - 3h) + 9f(x - 2h) - 45f(x - h) + 45f(x + h) - 9f(x + 2h) + f(x + 3h)} / 60h
"""
_stencils: Dict[int, Tuple[Tuple[int, ...], Tuple[float, ...], float]] = {
    1: ((0, 1), (-1.0, 1.0), 1.0),
    2: ((1, -1), (1.0, -1.0), 2.0),
    3: ((0, 1, 2, 3), (-11.0, 18.0, -9.0, 2.0), 6.0),
    4: ((-2, -1, 1, 2), (1.0, -8.0, 8.0, -1.0), 12.0),
    5: ((0, 1, 2, 3, 4, 5), (-137.0, 300.0, -300.0, 200.0, -75.0, 12.0), 60.0),
    6: ((-3, -2, -1, 1, 2, 3), (-1.0, 9.0, -45.0, 45.0, -9.0, 1.0), 60.0),
}


def clamp_order(accuracy_order: int) -> int:
    return min(6, max(1, int(accuracy_order)))


def findiff(
    f: Callable[[ndarray], ndarray],
    theta: ndarray,
    columns: ndarray,
    *,
    fx: ndarray,
    accuracy_order: int = 2,
) -> ndarray:
    """
    基于有限差分返回f对theta[columns]的雅可比矩阵[len(f) * len(columns)]
    fx是f(theta)，偏移量为0的项直接复用，不再调用f
    """
    _eps = float(numpy.finfo(numpy.float64).eps)
    offsets, coefs, denom = _stencils[clamp_order(accuracy_order)]
    assert len(fx.shape) == 1  # 函数返回值只能是向量，这样才满足ndims(Jacobian) == 2

    steps: ndarray = 3.0e-6 * numpy.maximum(numpy.abs(theta), numpy.sqrt(_eps))

    Jacobian: List[ndarray] = []  # List(ndarray((m, )), n)
    for i in numpy.flatnonzero(columns):
        h = float(steps[i])
        acc = numpy.zeros(fx.shape)
        for offset, coef in zip(offsets, coefs):
            if offset == 0:
                acc += coef * fx
                continue
            theta_call = theta.copy()
            theta_call[i] += offset * h
            acc += coef * f(theta_call)
        Jacobian.append(acc / (denom * h))
    if not Jacobian:
        return numpy.zeros((fx.shape[0], 0))
    return numpy.stack(Jacobian, axis=1)
