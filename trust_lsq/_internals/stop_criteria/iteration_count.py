from typing import Final

from numpy import ndarray

from trust_lsq._internals.stop_criteria.base import StopCriterion, check_iteration
from trust_lsq._internals.stop_criteria.status import Criterion_Kind, IterationStatus

DEFAULT_MAXIMUM_ITERATIONS: Final[int] = 1000


class IterationCountStopCriterion(StopCriterion):
    kind = Criterion_Kind.ITERATION_COUNT

    def __init__(
        self, maximum_number_of_iterations: int = DEFAULT_MAXIMUM_ITERATIONS
    ) -> None:
        self.maximum_number_of_iterations = maximum_number_of_iterations

    @property
    def maximum_number_of_iterations(self) -> int:
        return self._maximum

    @maximum_number_of_iterations.setter
    def maximum_number_of_iterations(self, value: int) -> None:
        if value < 1:
            raise ValueError(f"the maximum number of iterations must be positive, got {value}")
        self._maximum = int(value)

    def reset_maximum_number_of_iterations_to_default(self) -> None:
        self._maximum = DEFAULT_MAXIMUM_ITERATIONS

    def determine_status(
        self,
        iteration: int,
        solution: ndarray,
        source: ndarray,
        residual: ndarray,
    ) -> IterationStatus:
        check_iteration(iteration)
        if iteration >= self._maximum:
            self._status = IterationStatus.STOPPED_WITHOUT_CONVERGENCE
        else:
            self._status = IterationStatus.RUNNING
        return self._status

    def clone(self) -> "IterationCountStopCriterion":
        return IterationCountStopCriterion(self._maximum)
