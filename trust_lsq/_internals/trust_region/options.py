from typing import Optional

from trust_lsq._internals.common.checks import check_nonnegative
from trust_lsq._internals.trust_region.flag import Subproblem


class Trust_Region_Options:
    tol_grad: float = 1.0e-8
    tol_step: float = 1.0e-8
    tol_fval: float = 1.0e-8
    tol_radius: float = 1.0e-8
    max_iter: Optional[int] = None  # None表示200 * (自由参数个数 + 1)
    max_delta: float = 1000.0
    eta: float = 0.0
    subproblem: Subproblem = Subproblem.DOGLEG
    check_rel: Optional[float] = 1.0e-2
    check_abs: Optional[float] = None
    check_iter: Optional[int] = 0  # 0表示只在起点检查解析雅可比，-1表示完全关闭检查，None表示每个被接受的点都检查
    display: bool = False

    def __init__(
        self,
        *,
        max_iter: Optional[int] = None,
        subproblem: Subproblem = Subproblem.DOGLEG,
    ) -> None:
        self.max_iter = max_iter
        self.subproblem = subproblem

    def iterations(self, n: int) -> int:
        if self.max_iter is None:
            return 200 * (n + 1)
        return self.max_iter

    def validate(self) -> None:
        check_nonnegative(self.tol_grad, "tol_grad")
        check_nonnegative(self.tol_step, "tol_step")
        check_nonnegative(self.tol_fval, "tol_fval")
        check_nonnegative(self.tol_radius, "tol_radius")
        check_nonnegative(self.eta, "eta")
        if self.max_iter is not None:
            check_nonnegative(self.max_iter, "max_iter")
        if not self.max_delta > 0:
            raise ValueError(f"max_delta must be positive, got {self.max_delta}")
        if not isinstance(self.subproblem, Subproblem):
            raise ValueError(f"unknown subproblem {self.subproblem!r}")
