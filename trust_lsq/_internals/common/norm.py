import math
from typing import cast

import numpy
from numpy import ndarray


def norm_inf(x: ndarray) -> float:
    if not x.size:
        return 0.0
    return float(numpy.abs(x).max())


def norm_l2(x: ndarray) -> float:
    infnorm = norm_inf(x)
    if infnorm == 0 or not math.isfinite(infnorm):
        return infnorm
    x = cast(ndarray, x / infnorm)
    return infnorm * math.sqrt(float(x @ x))


def all_finite(x: ndarray) -> bool:
    return bool(numpy.all(numpy.isfinite(x)))


def absolute(a: ndarray, b: ndarray) -> float:
    return norm_inf(a - b)


def relative(a: ndarray, b: ndarray) -> float:
    """
    max|a-b| / max(max|a|, max|b|)，两者都为零时返回0
    """
    scale = max(norm_inf(a), norm_inf(b))
    if scale == 0:
        return 0.0
    return absolute(a, b) / scale
