# -*- coding: utf-8 -*-

"""
迭代求解器的停止准则与汇总它们的Iterator
"""

from trust_lsq._internals.stop_criteria import (
    base,
    divergence,
    failure,
    iteration_count,
    iterator,
    residual,
    status,
)

IterationStatus = status.IterationStatus
Criterion_Kind = status.Criterion_Kind
StopCriterion = base.StopCriterion
ResidualStopCriterion = residual.ResidualStopCriterion
IterationCountStopCriterion = iteration_count.IterationCountStopCriterion
FailureStopCriterion = failure.FailureStopCriterion
DivergenceStopCriterion = divergence.DivergenceStopCriterion
Iterator = iterator.Iterator
