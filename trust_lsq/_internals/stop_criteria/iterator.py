import logging
from typing import Dict, Iterable, List, Optional

from numpy import ndarray

from trust_lsq._internals.stop_criteria.base import (
    StopCriterion,
    check_iteration,
    check_vector,
)
from trust_lsq._internals.stop_criteria.divergence import DivergenceStopCriterion
from trust_lsq._internals.stop_criteria.failure import FailureStopCriterion
from trust_lsq._internals.stop_criteria.iteration_count import (
    IterationCountStopCriterion,
)
from trust_lsq._internals.stop_criteria.residual import ResidualStopCriterion
from trust_lsq._internals.stop_criteria.status import (
    CONTINUE,
    Criterion_Kind,
    IterationStatus,
)

_log = logging.getLogger(__name__)


class Iterator:
    """
    停止准则的集合，每种准则至多一个
    按加入顺序逐个判断，第一个不是RUNNING/INDETERMINATE的状态即为结果
    """

    def __init__(self, criteria: Optional[Iterable[Optional[StopCriterion]]] = None) -> None:
        self._criteria: Dict[Criterion_Kind, StopCriterion] = {}
        self._status = IterationStatus.INDETERMINATE
        self._cancelled = False
        if criteria is not None:
            for criterion in criteria:
                if criterion is None:
                    continue
                self.add(criterion)

    @staticmethod
    def create_default() -> "Iterator":
        return Iterator(
            [
                FailureStopCriterion(),
                DivergenceStopCriterion(),
                IterationCountStopCriterion(),
                ResidualStopCriterion(),
            ]
        )

    @property
    def status(self) -> IterationStatus:
        return self._status

    @property
    def criteria(self) -> List[StopCriterion]:
        return list(self._criteria.values())

    def __len__(self) -> int:
        return len(self._criteria)

    def add(self, criterion: StopCriterion) -> None:
        if criterion is None:
            raise TypeError("the stop criterion can't be None")
        if criterion.kind in self._criteria:
            raise ValueError(f"a {criterion.kind.name} stop criterion is already present")
        self._criteria[criterion.kind] = criterion

    def remove(self, criterion: StopCriterion) -> None:
        if criterion is None:
            raise TypeError("the stop criterion can't be None")
        self._criteria.pop(criterion.kind, None)

    def contains(self, criterion: StopCriterion) -> bool:
        if criterion is None:
            raise TypeError("the stop criterion can't be None")
        return criterion.kind in self._criteria

    def determine_status(
        self,
        iteration: int,
        solution: ndarray,
        source: ndarray,
        residual: ndarray,
    ) -> IterationStatus:
        if not self._criteria:
            raise ValueError("the iterator has no stop criteria")
        check_iteration(iteration)
        check_vector(solution, "solution")
        check_vector(source, "source")
        check_vector(residual, "residual")

        # 取消之后不再调用各个准则
        if self._cancelled:
            return self._status

        for criterion in self._criteria.values():
            status = criterion.determine_status(iteration, solution, source, residual)
            if status in CONTINUE:
                continue
            _log.debug(
                "iteration %d stopped by %s: %s", iteration, criterion.kind.name, status.name
            )
            self._status = status
            return self._status

        self._status = IterationStatus.RUNNING
        return self._status

    def cancel(self) -> None:
        self._cancelled = True
        self._status = IterationStatus.CANCELLED

    def reset(self) -> None:
        self._status = IterationStatus.INDETERMINATE
        self._cancelled = False
        for criterion in self._criteria.values():
            criterion.reset()

    def clone(self) -> "Iterator":
        return Iterator([criterion.clone() for criterion in self._criteria.values()])
