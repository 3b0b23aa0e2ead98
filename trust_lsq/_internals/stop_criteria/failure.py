import numpy
from numpy import ndarray

from trust_lsq._internals.stop_criteria.base import (
    StopCriterion,
    check_iteration,
    check_vector,
)
from trust_lsq._internals.stop_criteria.status import Criterion_Kind, IterationStatus


class FailureStopCriterion(StopCriterion):
    """
    残差或解中出现NaN即判为失败
    """

    kind = Criterion_Kind.FAILURE

    def determine_status(
        self,
        iteration: int,
        solution: ndarray,
        source: ndarray,
        residual: ndarray,
    ) -> IterationStatus:
        check_iteration(iteration)
        _solution = check_vector(solution, "solution")
        _residual = check_vector(residual, "residual")
        if _solution.shape != _residual.shape:
            raise ValueError("the solution and the residual must have the same length")

        if numpy.any(numpy.isnan(_residual)) or numpy.any(numpy.isnan(_solution)):
            self._status = IterationStatus.FAILED
        else:
            self._status = IterationStatus.RUNNING
        return self._status

    def clone(self) -> "FailureStopCriterion":
        return FailureStopCriterion()
