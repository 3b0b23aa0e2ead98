import math

import numpy

from trust_lsq import pcg
from trust_lsq._internals.subproblem.quad_eval import QuadEvaluator
from numpy import ndarray

EPS = float(numpy.finfo(numpy.float64).eps)


def _random_symmetric(dim: int, eigs: ndarray) -> ndarray:
    Q, _ = numpy.linalg.qr(numpy.random.randn(dim, dim))
    H = (Q * eigs) @ Q.T
    return (H.T + H) / 2


class Test_pcg:
    def test_convex(self) -> None:
        numpy.random.seed(0)
        dim = 10
        delta = 9999
        for _ in range(500):
            H = _random_symmetric(dim, numpy.abs(numpy.random.randn(dim)) + 0.1)
            g = numpy.random.randn(dim)
            g_norm = float(numpy.linalg.norm(g))
            status = pcg.pcg(QuadEvaluator(g=g, H=H), delta)
            assert not status.hit_boundary
            assert status.flag in (
                pcg.Flag.RESIDUAL_CONVERGENCE,
                pcg.Flag.MAX_ITERATION,
            )
            if status.flag == pcg.Flag.RESIDUAL_CONVERGENCE:
                residual = H @ status.x + g
                assert numpy.linalg.norm(residual) < min(0.5, math.sqrt(g_norm)) * g_norm
            assert status.fval <= 0

    def test_nonconvex(self) -> None:
        numpy.random.seed(0)
        dim = 10
        for _ in range(500):
            H = _random_symmetric(dim, numpy.random.randn(dim))
            g = numpy.random.randn(dim)
            delta = float(numpy.exp(numpy.random.randn() * 2))
            status = pcg.pcg(QuadEvaluator(g=g, H=H), delta)
            assert status.size <= delta * (1 + 1e-6)
            assert status.fval <= 0
            if not status.hit_boundary:
                assert status.size < delta

    def test_exact_solution(self) -> None:
        # 梯度很小时截断容差约为 ||g||^1.5，3个不同特征值需要迭代3次
        H = numpy.diag([1.0, 2.0, 3.0])
        g = -1.0e-6 * numpy.array([1.0, 2.0, 3.0])
        status = pcg.pcg(QuadEvaluator(g=g, H=H), 100.0)
        assert not status.hit_boundary
        assert status.iter == 3
        assert numpy.abs(status.x / 1.0e-6 - 1).max() < math.sqrt(EPS)

    def test_negative_curvature(self) -> None:
        H = -numpy.eye(2)
        g = numpy.array([1.0, 0.0])
        status = pcg.pcg(QuadEvaluator(g=g, H=H), 2.0)
        assert status.flag == pcg.Flag.NEGATIVE_CURVATURE
        assert status.hit_boundary
        assert numpy.abs(status.x - numpy.array([-2.0, 0.0])).max() < 1e-12

    def test_out_of_trust_region(self) -> None:
        H = numpy.eye(2)
        g = numpy.array([10.0, 0.0])
        status = pcg.pcg(QuadEvaluator(g=g, H=H), 1.0)
        assert status.flag == pcg.Flag.OUT_OF_TRUST_REGION
        assert status.hit_boundary
        assert status.iter == 1
        assert numpy.abs(status.x - numpy.array([-1.0, 0.0])).max() < 1e-12

    def test_zero_gradient(self) -> None:
        status = pcg.pcg(QuadEvaluator(g=numpy.zeros(2), H=-numpy.eye(2)), 1.0)
        assert status.flag == pcg.Flag.ZERO_GRADIENT
        assert status.size == 0


if __name__ == "__main__":
    Test_pcg().test_convex()
    Test_pcg().test_nonconvex()
    Test_pcg().test_exact_solution()
    Test_pcg().test_negative_curvature()
    Test_pcg().test_out_of_trust_region()
    Test_pcg().test_zero_gradient()
