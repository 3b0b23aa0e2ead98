import math
from typing import Final

from numpy import ndarray

from trust_lsq._internals.common.checks import check_nonnegative
from trust_lsq._internals.common.norm import norm_inf
from trust_lsq._internals.stop_criteria.base import (
    StopCriterion,
    check_iteration,
    check_vector,
    check_vectors,
)
from trust_lsq._internals.stop_criteria.status import Criterion_Kind, IterationStatus

DEFAULT_MAXIMUM: Final[float] = 1.0e-12
DEFAULT_MINIMUM_ITERATIONS_BELOW_MAXIMUM: Final[int] = 0
_DEFAULT_LAST_ITERATION: Final[int] = -1


class ResidualStopCriterion(StopCriterion):
    """
    ||residual||_inf <= maximum * ||source||_inf 时判为收敛

    满足阈值的连续迭代次数（按相邻两次调用的迭代号之差累计）达到
    minimum_iterations_below_maximum后才判为收敛
    残差或右端项的范数为NaN时判为发散
    """

    kind = Criterion_Kind.RESIDUAL

    def __init__(
        self,
        maximum: float = DEFAULT_MAXIMUM,
        minimum_iterations_below_maximum: int = DEFAULT_MINIMUM_ITERATIONS_BELOW_MAXIMUM,
    ) -> None:
        self.maximum = maximum
        self.minimum_iterations_below_maximum = minimum_iterations_below_maximum
        self._last_iteration = _DEFAULT_LAST_ITERATION
        self._iteration_count = 0

    @property
    def maximum(self) -> float:
        return self._maximum

    @maximum.setter
    def maximum(self, value: float) -> None:
        check_nonnegative(value, "maximum")
        self._maximum = float(value)

    @property
    def minimum_iterations_below_maximum(self) -> int:
        return self._minimum_below

    @minimum_iterations_below_maximum.setter
    def minimum_iterations_below_maximum(self, value: int) -> None:
        check_nonnegative(value, "minimum_iterations_below_maximum")
        self._minimum_below = int(value)

    def reset_maximum_to_default(self) -> None:
        self._maximum = DEFAULT_MAXIMUM

    def reset_minimum_iterations_below_maximum_to_default(self) -> None:
        self._minimum_below = DEFAULT_MINIMUM_ITERATIONS_BELOW_MAXIMUM

    def determine_status(
        self,
        iteration: int,
        solution: ndarray,
        source: ndarray,
        residual: ndarray,
    ) -> IterationStatus:
        check_iteration(iteration)
        check_vectors(solution, source, residual)

        residual_norm = norm_inf(check_vector(residual, "residual"))
        threshold = self._maximum * norm_inf(check_vector(source, "source"))
        if math.isnan(threshold) or math.isnan(residual_norm):
            self._iteration_count = 0
            self._status = IterationStatus.DIVERGED
            return self._status

        if residual_norm <= threshold:
            if self._last_iteration <= iteration:
                self._iteration_count += iteration - self._last_iteration
                if self._iteration_count >= self._minimum_below:
                    self._status = IterationStatus.CONVERGED
                else:
                    self._status = IterationStatus.RUNNING
        else:
            self._iteration_count = 0
            self._status = IterationStatus.RUNNING
        self._last_iteration = iteration
        return self._status

    def reset(self) -> None:
        super().reset()
        self._last_iteration = _DEFAULT_LAST_ITERATION
        self._iteration_count = 0

    def clone(self) -> "ResidualStopCriterion":
        return ResidualStopCriterion(self._maximum, self._minimum_below)
