# -*- coding: utf-8 -*-


import logging
import math
from typing import Tuple

from numpy import ndarray

from trust_lsq._internals.common import typing
from trust_lsq._internals.common.checks import as_vector
from trust_lsq._internals.common.norm import all_finite, norm_l2
from trust_lsq._internals.line_search import errors, result

Line_Search_Failed = errors.Line_Search_Failed
Maximum_Iterations_Exceeded = errors.Maximum_Iterations_Exceeded
Evaluation_Failed = errors.Evaluation_Failed
Line_Search_Result = result.Line_Search_Result
Reason = result.Reason

_log = logging.getLogger(__name__)


def _evaluate(
    objective: typing.objective_t,
    gradient: typing.gradient_t,
    x: ndarray,
    step: float,
) -> Tuple[float, ndarray]:
    fval = float(objective(x))
    if not math.isfinite(fval):
        raise Evaluation_Failed(step, "objective value")
    grad = as_vector(gradient(x), "gradient")
    if not all_finite(grad):
        raise Evaluation_Failed(step, "gradient")
    return fval, grad


def weak_wolfe(
    objective: typing.objective_t,
    gradient: typing.gradient_t,
    x: ndarray,
    direction: ndarray,
    step: float = 1.0,
    *,
    c1: float = 1.0e-4,
    c2: float = 0.9,
    tol_step: float = 1.0e-5,
    max_iter: int = 10,
) -> Line_Search_Result:
    """
    沿下降方向d寻找满足弱Wolfe条件的步长a：
        f(x + a d) <= f(x) + c1 * a * g'd     (充分下降)
        g(x + a d)'d >= c2 * g'd              (曲率)

    区间[lower, upper)：充分下降不满足时upper = a，曲率条件不满足时lower = a
    upper有限时二分，否则a = 2 * lower
    """
    if objective is None or gradient is None:
        raise TypeError("the objective and the gradient can't be None")
    x = as_vector(x, "x")
    direction = as_vector(direction, "direction")
    if x.shape != direction.shape:
        raise ValueError("the direction must have the same length as x")
    if not 0 < c1 < c2 < 1:
        raise ValueError(f"0 < c1 < c2 < 1 is required, got c1 = {c1}, c2 = {c2}")
    if not step > 0:
        raise ValueError(f"the initial step must be positive, got {step}")
    if max_iter < 1:
        raise ValueError(f"max_iter must be positive, got {max_iter}")

    fval0, grad0 = _evaluate(objective, gradient, x, 0.0)
    slope0 = float(grad0 @ direction)
    if not slope0 < 0:
        raise ValueError(f"the direction is not a descent direction (g'd = {slope0})")

    d_norm = norm_l2(direction)
    lower, upper = 0.0, math.inf
    best = Line_Search_Result(x, fval0, grad0, 0.0, 0, Reason.LACK_OF_PROGRESS)
    for iter in range(1, max_iter + 1):
        x_new = x + step * direction
        fval, grad = _evaluate(objective, gradient, x_new, step)

        if fval > fval0 + c1 * step * slope0:
            upper = step
        elif float(grad @ direction) < c2 * slope0:
            best = Line_Search_Result(x_new, fval, grad, step, iter, Reason.LACK_OF_PROGRESS)
            lower = step
        else:
            return Line_Search_Result(x_new, fval, grad, step, iter, Reason.WEAK_WOLFE)

        if math.isinf(upper):
            step = 2.0 * lower
        else:
            if (upper - lower) * d_norm < tol_step:
                _log.debug(
                    "line search bracket [%g, %g) collapsed after %d iterations",
                    lower,
                    upper,
                    iter,
                )
                return best._replace(iter=iter)
            step = 0.5 * (lower + upper)

    raise Maximum_Iterations_Exceeded(max_iter, unbounded=math.isinf(upper))
