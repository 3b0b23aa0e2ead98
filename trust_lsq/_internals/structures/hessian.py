import math
from typing import Final

import numpy
from numpy import ndarray

from trust_lsq._internals.common.norm import all_finite


class Hessian:
    """
    Gauss-Newton近似 H = J'WJ，构造时对称化
    ill: 最小特征值小于sqrt(eps)，即H在某个方向上（近似）奇异
    """

    value: Final[ndarray]
    ill: Final[bool]

    def __init__(self, value: ndarray) -> None:
        _err = math.sqrt(float(numpy.finfo(numpy.float64).eps))

        value = (value.T + value) / 2.0
        if not value.size or not all_finite(value):
            ill = True
        else:
            e: ndarray = numpy.linalg.eigvalsh(value)
            ill = float(e.min()) < _err * max(float(e.max()), 1.0)

        self.value = value
        self.ill = ill
