# -*- coding: utf-8 -*-


import math
from typing import Optional

from numpy import ndarray

from trust_lsq._internals.common.norm import norm_l2
from trust_lsq._internals.subproblem import flag, status
from trust_lsq._internals.subproblem.boundary import to_boundary
from trust_lsq._internals.subproblem.quad_eval import QuadEvaluator, zero_step

Flag = flag.Flag
Status = status.Status


def _boundary_status(
    z: ndarray, d: ndarray, iter: int, flag: Flag, delta: float, qpval: QuadEvaluator
) -> Status:
    step = z + to_boundary(z, d, delta) * d
    size = norm_l2(step)
    if size > delta:
        step = (delta / size) * step
    return Status(step, iter, flag, delta, qpval, hit_boundary=True)


def pcg(qpval: QuadEvaluator, delta: float, *, max_iter: Optional[int] = None) -> Status:
    """
    截断共轭梯度法(Steihaug)求解信赖域子问题
        min g'p + 0.5 * p'Hp,  s.t. ||p|| <= delta

    - 遇到非正曲率方向(d'Hd <= 0)：沿d走到信赖域边界
    - 下一个迭代点越出信赖域：沿d走到信赖域边界
    - 残差足够小：返回内点
    - 迭代次数不超过问题维数
    """
    assert delta > 0
    g = qpval.g
    g_norm = norm_l2(g)
    if g_norm == 0:
        return Status(zero_step(qpval), 0, Flag.ZERO_GRADIENT, delta, qpval, hit_boundary=False)

    if max_iter is None:
        max_iter = qpval.n
    tol = min(0.5, math.sqrt(g_norm)) * g_norm

    H = qpval.H
    z = zero_step(qpval)
    r = g
    d = -r
    rr = float(r @ r)
    for iter in range(max_iter):
        dHd = qpval.curvature(d)
        if dHd <= 0:
            return _boundary_status(z, d, iter + 1, Flag.NEGATIVE_CURVATURE, delta, qpval)

        alpha = rr / dHd
        z_next = z + alpha * d
        if norm_l2(z_next) >= delta:
            return _boundary_status(z, d, iter + 1, Flag.OUT_OF_TRUST_REGION, delta, qpval)

        r = r + alpha * (H @ d)
        rr_next = float(r @ r)
        z = z_next
        if math.sqrt(rr_next) < tol:
            return Status(z, iter + 1, Flag.RESIDUAL_CONVERGENCE, delta, qpval, hit_boundary=False)

        beta = rr_next / rr
        d = -r + beta * d
        rr = rr_next

    return Status(z, max_iter, Flag.MAX_ITERATION, delta, qpval, hit_boundary=False)
