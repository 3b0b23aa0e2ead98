import enum


@enum.unique
class ExitCondition(enum.Enum):
    NONE = enum.auto()  # 尚未结束，求解器不会以此返回
    CONVERGED = enum.auto()  # RSS足够小
    RELATIVE_GRADIENT = enum.auto()  # 梯度足够小
    RELATIVE_POINTS = enum.auto()  # 步长相对参数足够小
    LACK_OF_PROGRESS = enum.auto()  # 信赖域半径收缩到阈值以下
    INVALID_VALUES = enum.auto()  # 出现NaN或inf
    EXCEED_ITERATIONS = enum.auto()
    MANUALLY_STOPPED = enum.auto()


SUCCESS = frozenset(
    (
        ExitCondition.CONVERGED,
        ExitCondition.RELATIVE_GRADIENT,
        ExitCondition.RELATIVE_POINTS,
    )
)


@enum.unique
class Subproblem(enum.Enum):
    DOGLEG = "dogleg"
    NEWTON_CG = "newton-cg"
