import abc
from typing import Optional

from numpy import ndarray

from trust_lsq._internals.common.checks import as_vector
from trust_lsq._internals.stop_criteria.status import Criterion_Kind, IterationStatus


def check_iteration(iteration: int) -> None:
    if iteration < 0:
        raise ValueError(f"the iteration number must be non-negative, got {iteration}")


def check_vector(x: Optional[ndarray], name: str) -> ndarray:
    return as_vector(x, name)


def check_vectors(
    solution: Optional[ndarray],
    source: Optional[ndarray],
    residual: Optional[ndarray],
) -> None:
    """
    三个向量都不能为None且长度相同
    """
    _solution = check_vector(solution, "solution")
    _source = check_vector(source, "source")
    _residual = check_vector(residual, "residual")
    if _solution.shape != _source.shape:
        raise ValueError("the solution and the source must have the same length")
    if _solution.shape != _residual.shape:
        raise ValueError("the solution and the residual must have the same length")


class StopCriterion(abc.ABC):
    """
    迭代求解器的停止准则，每次迭代完成后调用一次determine_status
    不相关的两次求解之间必须调用reset
    """

    kind: Criterion_Kind
    _status: IterationStatus = IterationStatus.INDETERMINATE

    @property
    def status(self) -> IterationStatus:
        return self._status

    @abc.abstractmethod
    def determine_status(
        self,
        iteration: int,
        solution: ndarray,
        source: ndarray,
        residual: ndarray,
    ) -> IterationStatus:
        ...

    def reset(self) -> None:
        self._status = IterationStatus.INDETERMINATE

    @abc.abstractmethod
    def clone(self) -> "StopCriterion":
        ...

    def __repr__(self) -> str:
        return f"{type(self).__name__}(status={self._status.name})"
