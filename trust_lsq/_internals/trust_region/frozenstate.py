# -*- coding: utf-8 -*-


from typing import Callable, NamedTuple

from trust_lsq._internals.subproblem.quad_eval import QuadEvaluator
from trust_lsq._internals.subproblem.status import Status
from trust_lsq._internals.trust_region import format, options
from trust_lsq.objective import ObjectiveModel


class FrozenState(NamedTuple):
    model: ObjectiveModel
    subproblem: Callable[[QuadEvaluator, float], Status]
    max_iter: int
    opts: options.Trust_Region_Options
    table: format.Progress_Table
