from numpy import ndarray

from trust_lsq._internals.common.norm import all_finite, norm_l2
from trust_lsq._internals.subproblem.flag import Flag
from trust_lsq._internals.subproblem.quad_eval import QuadEvaluator


class Status:
    x: ndarray
    fval: float
    iter: int
    flag: Flag
    size: float
    hit_boundary: bool

    def __init__(
        self,
        x: ndarray,
        iter: int,
        flag: Flag,
        delta: float,
        qpval: QuadEvaluator,
        *,
        hit_boundary: bool,
    ) -> None:
        assert all_finite(x)
        self.x = x
        self.fval = qpval(x)
        self.iter = iter
        self.flag = flag
        self.size = norm_l2(x)
        self.hit_boundary = hit_boundary
        assert self.size / delta < 1.0 + 1e-6

    @property
    def predicted_reduction(self) -> float:
        return -self.fval
