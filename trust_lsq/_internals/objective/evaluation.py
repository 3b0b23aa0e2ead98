import math
from typing import NamedTuple

import numpy
from numpy import ndarray

from trust_lsq._internals.structures.gradient import Gradient
from trust_lsq._internals.structures.hessian import Hessian


class Evaluation(NamedTuple):
    point: ndarray  # 内部参数
    parameters: ndarray  # 外部参数
    values: ndarray  # 模型值；未设置观测数据时即残差本身
    residuals: ndarray  # 加权残差
    rss: float


class Solution(NamedTuple):
    """
    一个点上的完整线性化信息，梯度与Hessian总是属于evaluation所在的点
    """

    evaluation: Evaluation
    jacobian: ndarray  # 内部参数下的残差雅可比矩阵
    grad: Gradient
    hessian: Hessian

    @property
    def x(self) -> ndarray:
        return self.evaluation.point

    @property
    def rss(self) -> float:
        return self.evaluation.rss


class Fit_Statistics(NamedTuple):
    degree_of_freedom: int
    covariance: ndarray
    standard_errors: ndarray
    correlation: ndarray


def unlinearized(ev: Evaluation) -> Solution:
    """
    没有线性化信息的解，雅可比、梯度与Hessian均为NaN
    """
    m, n = ev.residuals.shape[0], ev.point.shape[0]
    nan_grad = numpy.full((n,), numpy.nan)
    return Solution(
        ev,
        numpy.full((m, n), numpy.nan),
        Gradient(nan_grad, math.nan),
        Hessian(numpy.full((n, n), numpy.nan)),
    )
