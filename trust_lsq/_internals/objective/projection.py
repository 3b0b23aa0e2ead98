# -*- coding: utf-8 -*-


from typing import Final, Optional

import numpy
from numpy import ndarray

from trust_lsq._internals.common.checks import as_vector, check_same_length

"""
有界参数到无界参数的映射（参考MINUIT与lmfit的做法，加入scale）

1. lower < Pext < upper
   Pext = lower + (upper - lower) / 2 * (sin(Pint) + 1)
   Pint = asin(2 * (Pext - lower) / (upper - lower) - 1)
   dPext/dPint = (upper - lower) / 2 * cos(Pint)

2. lower < Pext
   Pext = lower + scale * (sqrt(Pint^2 + 1) - 1)
   Pint = sqrt(((Pext - lower) / scale + 1)^2 - 1)
   dPext/dPint = scale * Pint / sqrt(Pint^2 + 1)

3. Pext < upper
   Pext = upper - scale * (sqrt(Pint^2 + 1) - 1)
   Pint = sqrt(((upper - Pext) / scale + 1)^2 - 1)
   dPext/dPint = -scale * Pint / sqrt(Pint^2 + 1)

4. 无界
   Pext = scale * Pint
   Pint = Pext / scale
   dPext/dPint = scale

每个分量独立选择规则，inf表示该侧无界
"""


class Projection:
    lower: Final[ndarray]
    upper: Final[ndarray]
    scales: Final[ndarray]

    def __init__(self, lower: ndarray, upper: ndarray, scales: ndarray) -> None:
        self.lower = lower
        self.upper = upper
        self.scales = scales
        has_lower = numpy.isfinite(lower)
        has_upper = numpy.isfinite(upper)
        self._both = numpy.logical_and(has_lower, has_upper)
        self._lower_only = numpy.logical_and(has_lower, ~has_upper)
        self._upper_only = numpy.logical_and(~has_lower, has_upper)
        self._none = numpy.logical_and(~has_lower, ~has_upper)

    def to_external(self, p_int: ndarray) -> ndarray:
        p_ext = numpy.empty(p_int.shape)

        i = self._both
        half = (self.upper[i] - self.lower[i]) / 2.0
        p_ext[i] = self.lower[i] + half * (numpy.sin(p_int[i]) + 1.0)

        i = self._lower_only
        p_ext[i] = self.lower[i] + self.scales[i] * (
            numpy.sqrt(p_int[i] * p_int[i] + 1.0) - 1.0
        )

        i = self._upper_only
        p_ext[i] = self.upper[i] - self.scales[i] * (
            numpy.sqrt(p_int[i] * p_int[i] + 1.0) - 1.0
        )

        i = self._none
        p_ext[i] = self.scales[i] * p_int[i]
        return p_ext

    def to_internal(self, p_ext: ndarray) -> ndarray:
        p_int = numpy.empty(p_ext.shape)

        i = self._both
        ratio = 2.0 * (p_ext[i] - self.lower[i]) / (self.upper[i] - self.lower[i]) - 1.0
        # 舍入误差可能使ratio略微越过[-1, 1]
        p_int[i] = numpy.arcsin(numpy.clip(ratio, -1.0, 1.0))

        i = self._lower_only
        shifted = numpy.maximum((p_ext[i] - self.lower[i]) / self.scales[i], 0.0) + 1.0
        p_int[i] = numpy.sqrt(shifted * shifted - 1.0)

        i = self._upper_only
        shifted = numpy.maximum((self.upper[i] - p_ext[i]) / self.scales[i], 0.0) + 1.0
        p_int[i] = numpy.sqrt(shifted * shifted - 1.0)

        i = self._none
        p_int[i] = p_ext[i] / self.scales[i]
        return p_int

    def derivative(self, p_int: ndarray) -> ndarray:
        """
        dPext/dPint，用于链式法则缩放雅可比矩阵的列
        """
        d = numpy.empty(p_int.shape)

        i = self._both
        d[i] = (self.upper[i] - self.lower[i]) / 2.0 * numpy.cos(p_int[i])

        i = self._lower_only
        d[i] = self.scales[i] * p_int[i] / numpy.sqrt(p_int[i] * p_int[i] + 1.0)

        i = self._upper_only
        d[i] = -self.scales[i] * p_int[i] / numpy.sqrt(p_int[i] * p_int[i] + 1.0)

        i = self._none
        d[i] = self.scales[i]
        return d


class Parameter_Space:
    """
    外部参数（全部参数，含固定参数）与内部参数（仅自由参数，无界）之间的投影
    """

    guess: Final[ndarray]
    free: Final[ndarray]
    lower: Final[ndarray]
    upper: Final[ndarray]
    scales: Final[ndarray]
    projection: Final[Projection]

    def __init__(
        self,
        guess: ndarray,
        free: ndarray,
        lower: ndarray,
        upper: ndarray,
        scales: ndarray,
    ) -> None:
        self.guess = guess
        self.free = free
        self.lower = lower
        self.upper = upper
        self.scales = scales
        self.projection = Projection(lower[free], upper[free], scales[free])

    @property
    def n_free(self) -> int:
        return int(numpy.count_nonzero(self.free))

    def to_external(self, internal: ndarray) -> ndarray:
        external = self.guess.copy()
        external[self.free] = self.projection.to_external(internal)
        return external

    def to_internal(self, external: ndarray) -> ndarray:
        return self.projection.to_internal(external[self.free])

    def derivative(self, internal: ndarray) -> ndarray:
        return self.projection.derivative(internal)


def make_parameter_space(
    initial_guess: Optional[ndarray],
    lower_bound: Optional[ndarray],
    upper_bound: Optional[ndarray],
    scales: Optional[ndarray],
    is_fixed: Optional[ndarray],
) -> Parameter_Space:
    guess = as_vector(initial_guess, "initial_guess")
    (n,) = guess.shape
    if not n:
        raise ValueError("initial_guess can't be empty")
    if not numpy.all(numpy.isfinite(guess)):
        raise ValueError("the initial guess must be finite")

    if lower_bound is None:
        lower = numpy.full((n,), -numpy.inf)
    else:
        lower = as_vector(lower_bound, "lower_bound")
        check_same_length(lower, guess, "lower_bound")
    if upper_bound is None:
        upper = numpy.full((n,), numpy.inf)
    else:
        upper = as_vector(upper_bound, "upper_bound")
        check_same_length(upper, guess, "upper_bound")
    if numpy.any(numpy.isnan(lower)) or numpy.any(numpy.isnan(upper)):
        raise ValueError("the bounds can't be NaN")
    if numpy.any(lower == numpy.inf) or numpy.any(upper == -numpy.inf):
        raise ValueError("the bounds must leave a non-empty feasible interval")
    if not numpy.all(lower <= upper):
        raise ValueError("the lower bounds can't be greater than the upper bounds")
    if not numpy.all(numpy.logical_and(lower <= guess, guess <= upper)):
        raise ValueError("the initial guess must lie within the bounds")

    if scales is None:
        _scales = numpy.ones((n,))
    else:
        _scales = as_vector(scales, "scales")
        check_same_length(_scales, guess, "scales")
        if not numpy.all(numpy.isfinite(_scales)) or numpy.any(_scales == 0):
            raise ValueError("the scales must be finite and non-zero")
        _scales = numpy.abs(_scales)

    if is_fixed is None:
        fixed = numpy.zeros((n,), dtype=numpy.bool_)
    else:
        fixed = numpy.array(is_fixed, dtype=numpy.bool_)
        if fixed.shape != guess.shape:
            raise ValueError("is_fixed must have the same length as the initial guess")
    # 上下界重合的参数按固定参数处理
    fixed = numpy.logical_or(fixed, lower == upper)
    if numpy.all(fixed):
        raise ValueError("all the parameters can't be fixed")

    return Parameter_Space(guess, ~fixed, lower, upper, _scales)
