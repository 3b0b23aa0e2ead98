# -*- coding: utf-8 -*-


import logging
import warnings
from typing import Optional

import numpy
import scipy.linalg  # type: ignore
from numpy import ndarray

from trust_lsq._internals.common.norm import all_finite, norm_l2
from trust_lsq._internals.subproblem import flag, status
from trust_lsq._internals.subproblem.boundary import to_boundary
from trust_lsq._internals.subproblem.quad_eval import QuadEvaluator, zero_step

Flag = flag.Flag
Status = status.Status

_log = logging.getLogger(__name__)


def gauss_newton(qpval: QuadEvaluator) -> Optional[ndarray]:
    """
    解正规方程 H @ p = -g；H奇异、病态或p不是下降方向时返回None，只使用Cauchy点
    """
    with warnings.catch_warnings():
        warnings.simplefilter("error", scipy.linalg.LinAlgWarning)
        try:
            p: ndarray = scipy.linalg.solve(qpval.H, -qpval.g, assume_a="sym")
        except (numpy.linalg.LinAlgError, scipy.linalg.LinAlgWarning) as e:
            _log.debug("Gauss-Newton step unavailable: %s", e)
            return None
    if not all_finite(p):
        return None
    # H不定时p可能不是下降方向
    if float(qpval.g @ p) >= 0:
        return None
    return p


def cauchy_point(qpval: QuadEvaluator, delta: float) -> ndarray:
    """
    最速下降方向上的二次型极小点
    g'Hg <= 0 时二次型沿-g无下界，直接走到信赖域边界
    """
    g = qpval.g
    gHg = qpval.curvature(g)
    if gHg <= 0:
        return (-delta / norm_l2(g)) * g
    return -(float(g @ g) / gHg) * g


def dogleg(qpval: QuadEvaluator, delta: float) -> Status:
    assert delta > 0
    g = qpval.g
    g_norm = norm_l2(g)
    if g_norm == 0:
        return Status(zero_step(qpval), 0, Flag.ZERO_GRADIENT, delta, qpval, hit_boundary=False)

    p_gn = gauss_newton(qpval)
    if p_gn is not None and norm_l2(p_gn) <= delta:
        # Gauss-Newton点在信赖域内
        return Status(p_gn, 0, Flag.GAUSS_NEWTON, delta, qpval, hit_boundary=False)

    p_c = cauchy_point(qpval, delta)
    c_norm = norm_l2(p_c)
    if c_norm >= delta:
        # Cauchy点在信赖域外，截断到边界
        step = (delta / c_norm) * p_c
        return Status(step, 0, Flag.CAUCHY_BOUNDARY, delta, qpval, hit_boundary=True)

    if p_gn is None:
        return Status(p_c, 0, Flag.CAUCHY_INTERIOR, delta, qpval, hit_boundary=False)

    # 折线 p_c + tau * (p_gn - p_c) 与边界的交点
    d = p_gn - p_c
    tau = min(to_boundary(p_c, d, delta), 1.0)
    step = p_c + tau * d
    size = norm_l2(step)
    if size > delta:
        step = (delta / size) * step
    return Status(step, 0, Flag.DOGLEG_BOUNDARY, delta, qpval, hit_boundary=True)
