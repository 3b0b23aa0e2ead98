from typing import Final

import numpy
from numpy import ndarray

from trust_lsq._internals.common.norm import all_finite


class QuadEvaluator:
    """
    二次模型 m(x) = g'x + 0.5 * x'Hx
    """

    __H: Final[ndarray]
    __g: Final[ndarray]

    def __init__(self, *, g: ndarray, H: ndarray) -> None:
        (n,) = g.shape
        assert H.shape == (n, n)
        assert all_finite(g)
        assert all_finite(H)
        self.__g = g.copy()
        self.__H = (H.T + H) / 2.0

    def __call__(self, x: ndarray) -> float:
        assert all_finite(x)
        return 0.5 * float(x @ (self.__H @ x)) + float(self.__g @ x)

    @property
    def H(self) -> ndarray:
        return self.__H.copy()

    @property
    def g(self) -> ndarray:
        return self.__g.copy()

    @property
    def n(self) -> int:
        return int(self.__g.shape[0])

    def curvature(self, d: ndarray) -> float:
        return float(d @ (self.__H @ d))


def zero_step(qpval: QuadEvaluator) -> ndarray:
    return numpy.zeros((qpval.n,))
