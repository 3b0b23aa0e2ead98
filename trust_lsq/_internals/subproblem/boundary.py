import math

from numpy import ndarray


def to_boundary(z: ndarray, d: ndarray, delta: float) -> float:
    """
    求 tau >= 0 使 ||z + tau * d|| == delta，要求 ||z|| <= delta
    (d'd)tau^2 + (2z'd)tau + (z'z - delta^2) == 0
    取正根，使用不损失精度的求根公式
    """
    a = float(d @ d)
    b = 2.0 * float(z @ d)
    c = float(z @ z) - delta * delta
    assert a > 0
    if c >= 0:
        return 0.0
    aux = b + math.copysign(math.sqrt(b * b - 4.0 * a * c), b)
    return max(-aux / (2.0 * a), -2.0 * c / aux)
