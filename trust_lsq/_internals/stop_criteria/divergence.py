from typing import Final, Optional

import numpy
from numpy import ndarray

from trust_lsq._internals.common.norm import norm_inf
from trust_lsq._internals.stop_criteria.base import (
    StopCriterion,
    check_iteration,
    check_vector,
)
from trust_lsq._internals.stop_criteria.status import Criterion_Kind, IterationStatus

DEFAULT_MAXIMUM_RELATIVE_INCREASE: Final[float] = 0.08
DEFAULT_MINIMUM_ITERATIONS: Final[int] = 10
_DEFAULT_LAST_ITERATION: Final[int] = -1


class DivergenceStopCriterion(StopCriterion):
    """
    最近minimum_iterations次迭代中残差范数每次都增长超过maximum_relative_increase时判为发散
    残差范数为NaN时直接判为发散
    """

    kind = Criterion_Kind.DIVERGENCE

    def __init__(
        self,
        maximum_relative_increase: float = DEFAULT_MAXIMUM_RELATIVE_INCREASE,
        minimum_iterations: int = DEFAULT_MINIMUM_ITERATIONS,
    ) -> None:
        self.maximum_relative_increase = maximum_relative_increase
        self.minimum_iterations = minimum_iterations
        self._history: Optional[ndarray] = None
        self._last_iteration = _DEFAULT_LAST_ITERATION

    @property
    def maximum_relative_increase(self) -> float:
        return self._increase

    @maximum_relative_increase.setter
    def maximum_relative_increase(self, value: float) -> None:
        if not value > 0:
            raise ValueError(f"the maximum relative increase must be positive, got {value}")
        self._increase = float(value)

    @property
    def minimum_iterations(self) -> int:
        return self._minimum

    @minimum_iterations.setter
    def minimum_iterations(self, value: int) -> None:
        # 至少要三次迭代才能计算相对增长
        if value < 3:
            raise ValueError(f"the minimum number of iterations must be at least 3, got {value}")
        self._minimum = int(value)

    def reset_maximum_relative_increase_to_default(self) -> None:
        self._increase = DEFAULT_MAXIMUM_RELATIVE_INCREASE

    def reset_minimum_iterations_to_default(self) -> None:
        self._minimum = DEFAULT_MINIMUM_ITERATIONS

    def determine_status(
        self,
        iteration: int,
        solution: ndarray,
        source: ndarray,
        residual: ndarray,
    ) -> IterationStatus:
        check_iteration(iteration)
        _residual = check_vector(residual, "residual")
        if self._last_iteration >= iteration:
            # 同一次迭代只记录一次
            return self._status

        length = self._minimum + 1
        if self._history is None or self._history.shape[0] != length:
            self._history = numpy.zeros((length,))
        self._history[:-1] = self._history[1:].copy()
        self._history[-1] = norm_inf(_residual)

        if numpy.isnan(self._history[-1]):
            self._status = IterationStatus.DIVERGED
            return self._status

        if self._is_diverging(self._history):
            self._status = IterationStatus.DIVERGED
        else:
            self._status = IterationStatus.RUNNING
        self._last_iteration = iteration
        return self._status

    def _is_diverging(self, history: ndarray) -> bool:
        previous, current = history[:-1], history[1:]
        return bool(
            numpy.all(current - previous >= 0)
            and numpy.all(previous * (1.0 + self._increase) < current)
        )

    def reset(self) -> None:
        super().reset()
        self._history = None
        self._last_iteration = _DEFAULT_LAST_ITERATION

    def clone(self) -> "DivergenceStopCriterion":
        return DivergenceStopCriterion(self._increase, self._minimum)
