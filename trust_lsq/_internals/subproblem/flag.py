import enum


@enum.unique
class Flag(enum.Enum):
    # dogleg
    GAUSS_NEWTON = enum.auto()
    CAUCHY_BOUNDARY = enum.auto()
    CAUCHY_INTERIOR = enum.auto()
    DOGLEG_BOUNDARY = enum.auto()
    # truncated CG
    RESIDUAL_CONVERGENCE = enum.auto()
    NEGATIVE_CURVATURE = enum.auto()
    OUT_OF_TRUST_REGION = enum.auto()
    MAX_ITERATION = enum.auto()
    # 梯度为零
    ZERO_GRADIENT = enum.auto()
