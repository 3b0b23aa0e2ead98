# -*- coding: utf-8 -*-


import logging
import math
from typing import Callable, Dict, NamedTuple, Optional

from numpy import ndarray

from trust_lsq import dogleg, pcg
from trust_lsq._internals.common.norm import all_finite, norm_l2
from trust_lsq._internals.objective.evaluation import (
    Fit_Statistics,
    Solution,
    unlinearized,
)
from trust_lsq._internals.subproblem.quad_eval import QuadEvaluator
from trust_lsq._internals.subproblem.status import Status
from trust_lsq._internals.trust_region import flag, format, options
from trust_lsq._internals.trust_region.frozenstate import FrozenState
from trust_lsq._internals.trust_region.jacobian_check import (  # noqa: F401
    Jacobian_Check_Failed,
    jacobian_check,
)
from trust_lsq.objective import ObjectiveModel

Trust_Region_Options = options.Trust_Region_Options
ExitCondition = flag.ExitCondition
Subproblem = flag.Subproblem

_log = logging.getLogger(__name__)

_subproblems: Dict[Subproblem, Callable[[QuadEvaluator, float], Status]] = {
    Subproblem.DOGLEG: dogleg.dogleg,
    Subproblem.NEWTON_CG: pcg.pcg,
}


class Trust_Region_Result(NamedTuple):
    x: ndarray  # 外部参数
    solution: Solution
    iter: int
    delta: float
    exit: ExitCondition
    statistics: Fit_Statistics
    function_evaluations: int
    jacobian_evaluations: int

    @property
    def success(self) -> bool:
        return self.exit in flag.SUCCESS

    @property
    def rss(self) -> float:
        return self.solution.rss

    @property
    def covariance(self) -> ndarray:
        return self.statistics.covariance

    @property
    def standard_errors(self) -> ndarray:
        return self.statistics.standard_errors

    @property
    def correlation(self) -> ndarray:
        return self.statistics.correlation


class _MutState(NamedTuple):
    iter: int
    delta: float


def _make_result(
    state: FrozenState, sol: Solution, mut_state: _MutState, exit: ExitCondition
) -> Trust_Region_Result:
    _log.debug(
        "trust region stopped after %d iterations: %s (rss = %g)",
        mut_state.iter,
        exit.name,
        sol.rss,
    )
    model = state.model
    return Trust_Region_Result(
        x=sol.evaluation.parameters,
        solution=sol,
        iter=mut_state.iter,
        delta=mut_state.delta,
        exit=exit,
        statistics=model.statistics(sol.evaluation),
        function_evaluations=model.function_evaluations,
        jacobian_evaluations=model.jacobian_evaluations,
    )


def _solution_finite(sol: Solution) -> bool:
    return (
        math.isfinite(sol.rss)
        and all_finite(sol.grad.value)
        and all_finite(sol.hessian.value)
    )


def _initial_delta(sol: Solution, max_delta: float) -> float:
    g = sol.grad.value
    denom = float((sol.hessian.value @ g) @ g)
    if denom == 0:
        return 1.0
    return min(max(float(g @ g) / denom, 1.0), max_delta)


def _output(
    state: FrozenState,
    sol: Solution,
    mut_state: _MutState,
    sub_status: Optional[Status],
    rho: float,
    accepted: Optional[bool],
) -> None:
    if state.opts.display:
        print(
            state.table.format(
                mut_state.iter,
                sol.rss,
                sol.grad.infnorm,
                mut_state.delta,
                sub_status,
                rho,
                accepted,
            )
        )


def _run(state: FrozenState) -> Trust_Region_Result:
    model, opts = state.model, state.opts
    ev0 = model.evaluate_at(model.initial_point())

    # 起点不可求值或不迭代时不计算雅可比矩阵
    if not math.isfinite(ev0.rss):
        sol0 = unlinearized(ev0)
        return _make_result(state, sol0, _MutState(0, 0.0), ExitCondition.INVALID_VALUES)
    if state.max_iter == 0:
        sol0 = unlinearized(ev0)
        return _make_result(state, sol0, _MutState(0, 0.0), ExitCondition.MANUALLY_STOPPED)

    sol = model.linearize(ev0)
    if ev0.rss <= opts.tol_fval:
        return _make_result(state, sol, _MutState(0, 0.0), ExitCondition.CONVERGED)
    if not _solution_finite(sol):
        return _make_result(state, sol, _MutState(0, 0.0), ExitCondition.INVALID_VALUES)

    jacobian_check(model, ev0, 0, opts)
    if sol.grad.infnorm <= opts.tol_grad:
        return _make_result(state, sol, _MutState(0, 0.0), ExitCondition.RELATIVE_GRADIENT)

    mut_state = _MutState(iter=0, delta=_initial_delta(sol, opts.max_delta))
    _output(state, sol, mut_state, None, math.nan, None)

    while mut_state.iter < state.max_iter:
        iter = mut_state.iter + 1
        delta = mut_state.delta

        if sol.hessian.ill:
            _log.debug("iteration %d: the Gauss-Newton hessian is nearly singular", iter)
        qpval = QuadEvaluator(g=sol.grad.value, H=sol.hessian.value)
        sub_status = state.subproblem(qpval, delta)
        pred = sub_status.predicted_reduction

        P = sol.x
        if sub_status.size <= opts.tol_step * (opts.tol_step + norm_l2(P)):
            mut_state = _MutState(iter, delta)
            return _make_result(state, sol, mut_state, ExitCondition.RELATIVE_POINTS)

        ev = model.evaluate_at(P + sub_status.x)
        if not math.isfinite(ev.rss):
            mut_state = _MutState(iter, delta)
            return _make_result(state, sol, mut_state, ExitCondition.INVALID_VALUES)

        # pred 是 0.5 * RSS 的预测下降量
        rho = 0.0 if pred == 0 else 0.5 * (sol.rss - ev.rss) / pred

        if rho > 0.75 and sub_status.hit_boundary:
            delta = min(2.0 * delta, opts.max_delta)
        elif rho < 0.25:
            delta = delta / 4.0
            if delta <= opts.tol_radius * (opts.tol_radius + float(P @ P)):
                mut_state = _MutState(iter, delta)
                _output(state, sol, mut_state, sub_status, rho, False)
                return _make_result(state, sol, mut_state, ExitCondition.LACK_OF_PROGRESS)
        mut_state = _MutState(iter, delta)

        if rho <= opts.eta:
            _output(state, sol, mut_state, sub_status, rho, False)
            continue

        sol = model.linearize(ev)
        _output(state, sol, mut_state, sub_status, rho, True)
        if not _solution_finite(sol):
            return _make_result(state, sol, mut_state, ExitCondition.INVALID_VALUES)
        jacobian_check(model, ev, iter, opts)
        if sol.rss <= opts.tol_fval:
            return _make_result(state, sol, mut_state, ExitCondition.CONVERGED)
        if sol.grad.infnorm <= opts.tol_grad:
            return _make_result(state, sol, mut_state, ExitCondition.RELATIVE_GRADIENT)

    return _make_result(state, sol, mut_state, ExitCondition.EXCEED_ITERATIONS)


"""
过程式的接口
"""


def trust_region(
    model: ObjectiveModel, opts: Optional[Trust_Region_Options] = None
) -> Trust_Region_Result:
    """
    信赖域法求解非线性最小二乘 min RSS(P)
    model需要已经调用过set_parameters；opts为None时使用默认选项
    """
    if model is None:
        raise TypeError("the objective model can't be None")
    if opts is None:
        opts = Trust_Region_Options()
    opts.validate()

    state = FrozenState(
        model=model,
        subproblem=_subproblems[opts.subproblem],
        max_iter=opts.iterations(model.space.n_free),
        opts=opts,
        table=format.Progress_Table(),
    )
    return _run(state)
