# -*- coding: utf-8 -*-


import math
from typing import Optional, Tuple, Union

import numpy
import scipy.linalg  # type: ignore
from numpy import ndarray

from trust_lsq._internals.common import typing
from trust_lsq._internals.common.checks import as_vector
from trust_lsq._internals.common.norm import all_finite
from trust_lsq._internals.objective import evaluation, findiff, projection
from trust_lsq._internals.structures.gradient import make_gradient
from trust_lsq._internals.structures.hessian import Hessian

Evaluation = evaluation.Evaluation
Solution = evaluation.Solution
Fit_Statistics = evaluation.Fit_Statistics


class ObjectiveModel:
    """
    非线性最小二乘的目标模型

    对观测数据(x, y)、权重W与模型函数f(x; p)：
        残差       R = L(y - f(x; p))，其中W = LL'
        RSS        = R'R
        梯度       g = -J'W(y - f(x; p)) = J_R' R
        近似Hessian H = J'WJ = J_R' J_R
    二次模型 m(s) = g's + 0.5 * s'Hs 描述的是 0.5 * RSS 的变化量

    未设置观测数据时，function(p)的返回值直接作为残差
    """

    def __init__(
        self,
        function: typing.model_t,
        jacobian: typing.jacobian_t = None,
        *,
        accuracy_order: int = 2,
    ) -> None:
        if function is None:
            raise TypeError("the objective function can't be None")
        if not callable(function):
            raise TypeError("the objective function must be callable")
        if jacobian is not None and not callable(jacobian):
            raise TypeError("the jacobian must be callable")
        self._function = function
        self._jacobian = jacobian
        self.accuracy_order = findiff.clamp_order(accuracy_order)

        self.observed_x: Optional[ndarray] = None
        self.observed_y: Optional[ndarray] = None
        self.weights: Optional[ndarray] = None
        self._L: Optional[ndarray] = None
        self._space: Optional[projection.Parameter_Space] = None

        self.function_evaluations = 0
        self.jacobian_evaluations = 0

    """
    数据与参数设置
    """

    def set_observed(
        self, x: ndarray, y: ndarray, weights: Optional[ndarray] = None
    ) -> None:
        if x is None or y is None:
            raise TypeError("the data set can't be None")
        _x = numpy.asarray(x, dtype=numpy.float64)
        _y = as_vector(y, "observed y")
        if _x.shape[0] != _y.shape[0]:
            raise ValueError("the observed x must have as many entries as observed y")
        if weights is not None:
            w = as_vector(weights, "weights")
            if w.shape != _y.shape:
                raise ValueError("the weights must have as many entries as observed y")
            if not all_finite(w):
                raise ValueError("the weights are not well-defined")
            if not numpy.any(w != 0):
                raise ValueError("all the weights can't be zero")
            w = numpy.abs(w)
            self.weights = w
            self._L = numpy.sqrt(w)
        else:
            self.weights = None
            self._L = None
        self.observed_x = _x
        self.observed_y = _y

    def set_parameters(
        self,
        initial_guess: ndarray,
        *,
        lower_bound: Optional[ndarray] = None,
        upper_bound: Optional[ndarray] = None,
        scales: Optional[ndarray] = None,
        is_fixed: Optional[ndarray] = None,
    ) -> None:
        self._space = projection.make_parameter_space(
            initial_guess, lower_bound, upper_bound, scales, is_fixed
        )

    @property
    def space(self) -> projection.Parameter_Space:
        if self._space is None:
            raise ValueError("set_parameters must be called before evaluating the model")
        return self._space

    @property
    def has_analytic_jacobian(self) -> bool:
        return self._jacobian is not None

    @property
    def number_of_observations(self) -> int:
        return 0 if self.observed_y is None else self.observed_y.shape[0]

    def initial_point(self) -> ndarray:
        return self.space.to_internal(self.space.guess)

    def to_external(self, internal: ndarray) -> ndarray:
        return self.space.to_external(internal)

    def to_internal(self, external: ndarray) -> ndarray:
        return self.space.to_internal(as_vector(external, "parameters"))

    """
    求值
    """

    def _call(self, f: typing.model_t, p: ndarray) -> ndarray:
        if self.observed_x is None:
            return numpy.asarray(f(p), dtype=numpy.float64)
        return numpy.asarray(f(p, self.observed_x), dtype=numpy.float64)

    def _values(self, parameters: ndarray) -> ndarray:
        self.function_evaluations += 1
        values = self._call(self._function, parameters).reshape(-1)
        if self.observed_y is not None and values.shape != self.observed_y.shape:
            raise ValueError(
                f"the model returned {values.shape[0]} values"
                f" for {self.observed_y.shape[0]} observations"
            )
        return values

    def _residuals(self, values: ndarray) -> ndarray:
        if self.observed_y is None:
            return values
        residuals = self.observed_y - values
        if self._L is not None:
            residuals = residuals * self._L
        return residuals

    def evaluate_at(self, point: ndarray) -> Evaluation:
        space = self.space
        point = as_vector(point, "point")
        if point.shape != (space.n_free,):
            raise ValueError(
                f"the point must have {space.n_free} entries, got {point.shape[0]}"
            )
        if not all_finite(point):
            raise ValueError("the parameters must be finite")
        parameters = space.to_external(point)
        values = self._values(parameters)
        residuals = self._residuals(values)
        with numpy.errstate(over="ignore", invalid="ignore"):
            rss = float(residuals @ residuals)
        return Evaluation(point, parameters, values, residuals, rss)

    def analytic_jacobian(self, ev: Evaluation) -> ndarray:
        """
        外部参数下模型值的雅可比矩阵，只保留自由参数的列
        """
        assert self._jacobian is not None
        self.jacobian_evaluations += 1
        J = self._call(self._jacobian, ev.parameters)
        J = J.reshape((ev.values.shape[0], -1))
        if J.shape[1] != self.space.guess.shape[0]:
            raise ValueError(
                f"the jacobian must have {self.space.guess.shape[0]} columns,"
                f" got {J.shape[1]}"
            )
        return J[:, self.space.free]

    def numerical_jacobian(self, ev: Evaluation) -> ndarray:
        return findiff.findiff(
            self._values,
            ev.parameters,
            self.space.free,
            fx=ev.values,
            accuracy_order=self.accuracy_order,
        )

    def _residual_jacobian(self, ev: Evaluation) -> ndarray:
        J = (
            self.analytic_jacobian(ev)
            if self._jacobian is not None
            else self.numerical_jacobian(ev)
        )
        if self.observed_y is None:
            return J
        if self._L is not None:
            return -(self._L.reshape(-1, 1) * J)
        return -J

    def linearize(self, ev: Evaluation) -> Solution:
        # 链式法则：Jint = Jext * dPext/dPint
        J = self._residual_jacobian(ev) * self.space.derivative(ev.point)
        with numpy.errstate(over="ignore", invalid="ignore"):
            g: ndarray = J.T @ ev.residuals
            H: ndarray = J.T @ J
        return Solution(ev, J, make_gradient(g), Hessian(H))

    """
    拟合结果的统计量
    """

    def degree_of_freedom(self, ev: Evaluation) -> int:
        return ev.residuals.shape[0] - self.space.n_free

    def statistics(self, ev: Evaluation) -> Fit_Statistics:
        """
        协方差 = pinv(J'WJ) * RSS / dof，在外部参数下计算，固定参数对应的行列为0
        """
        space = self.space
        n = space.guess.shape[0]
        dof = self.degree_of_freedom(ev)

        # 自由度不足或雅可比矩阵不可用时自由参数的协方差为NaN
        covariance = numpy.zeros((n, n))
        free_cov: Union[ndarray, float] = numpy.nan
        if dof > 0 and math.isfinite(ev.rss):
            J = self._residual_jacobian(ev)
            if all_finite(J):
                free_cov = scipy.linalg.pinvh(J.T @ J) * (ev.rss / dof)
        covariance[numpy.ix_(space.free, space.free)] = free_cov

        variance = numpy.diag(covariance)
        standard_errors = numpy.sqrt(numpy.maximum(variance, 0.0))
        scale = numpy.outer(standard_errors, standard_errors)
        with numpy.errstate(divide="ignore", invalid="ignore"):
            correlation = numpy.where(scale > 0, covariance / scale, 0.0)
        return Fit_Statistics(dof, covariance, standard_errors, correlation)

    def to_objective_function(self) -> Tuple[typing.objective_t, typing.gradient_t]:
        """
        以内部参数为自变量的 (0.5 * RSS, 梯度)，供线搜索等基于梯度的方法使用
        """

        def objective(x: ndarray) -> float:
            return 0.5 * self.evaluate_at(x).rss

        def gradient(x: ndarray) -> ndarray:
            return self.linearize(self.evaluate_at(x)).grad.value

        return objective, gradient
