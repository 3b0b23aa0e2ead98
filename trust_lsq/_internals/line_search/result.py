import enum
from typing import NamedTuple

from numpy import ndarray


@enum.unique
class Reason(enum.Enum):
    WEAK_WOLFE = enum.auto()  # 同时满足充分下降与曲率条件
    LACK_OF_PROGRESS = enum.auto()  # 区间已收缩到tol_step以下


class Line_Search_Result(NamedTuple):
    x: ndarray
    fval: float
    grad: ndarray
    step: float
    iter: int
    reason: Reason
