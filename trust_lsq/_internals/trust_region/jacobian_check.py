from typing import Final

from numpy import ndarray

from trust_lsq._internals.common.norm import absolute, relative
from trust_lsq._internals.objective.evaluation import Evaluation
from trust_lsq._internals.trust_region.options import Trust_Region_Options
from trust_lsq.objective import ObjectiveModel


class Jacobian_Check_Failed(Exception):
    iter: Final[int]
    error: Final[float]
    analytic: Final[ndarray]
    findiff_: Final[ndarray]

    def __init__(
        self,
        iter: int,
        error: float,
        analytic: ndarray,
        findiff_: ndarray,
    ) -> None:
        super().__init__(
            f"the analytic jacobian disagrees with finite differences"
            f" at iteration {iter} (error = {error:.6g})"
        )
        self.iter = iter
        self.error = error
        self.analytic = analytic
        self.findiff_ = findiff_


def jacobian_check(
    model: ObjectiveModel, ev: Evaluation, iter: int, opts: Trust_Region_Options
) -> None:
    if not model.has_analytic_jacobian:
        return
    if opts.check_iter is not None and iter > opts.check_iter:
        return
    if opts.check_rel is None and opts.check_abs is None:
        return

    analytic = model.analytic_jacobian(ev)
    findiff_ = model.numerical_jacobian(ev)
    if opts.check_rel is not None:
        relerr = relative(analytic, findiff_)
        if relerr > opts.check_rel:
            raise Jacobian_Check_Failed(iter, relerr, analytic, findiff_)
    if opts.check_abs is not None:
        abserr = absolute(analytic, findiff_)
        if abserr > opts.check_abs:
            raise Jacobian_Check_Failed(iter, abserr, analytic, findiff_)
