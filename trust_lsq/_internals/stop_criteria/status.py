import enum


@enum.unique
class IterationStatus(enum.Enum):
    INDETERMINATE = enum.auto()  # 尚未调用过determine_status
    RUNNING = enum.auto()
    CONVERGED = enum.auto()
    DIVERGED = enum.auto()
    FAILED = enum.auto()
    STOPPED_WITHOUT_CONVERGENCE = enum.auto()
    CANCELLED = enum.auto()


CONTINUE = frozenset((IterationStatus.INDETERMINATE, IterationStatus.RUNNING))


@enum.unique
class Criterion_Kind(enum.Enum):
    FAILURE = enum.auto()
    DIVERGENCE = enum.auto()
    ITERATION_COUNT = enum.auto()
    RESIDUAL = enum.auto()
