from typing import NamedTuple

from numpy import ndarray

from trust_lsq._internals.common.norm import norm_inf


class Gradient(NamedTuple):
    value: ndarray
    infnorm: float


def make_gradient(value: ndarray) -> Gradient:
    return Gradient(value, norm_inf(value))
