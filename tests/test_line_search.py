# -*- coding: utf-8 -*-
import math

import numpy
import pytest

from trust_lsq import line_search
from trust_lsq.objective import ObjectiveModel
from numpy import ndarray


def sphere(x: ndarray) -> float:
    return 0.5 * float(x @ x)


def sphere_grad(x: ndarray) -> ndarray:
    return x.copy()


x0 = numpy.array([1.0, 1.0])
d0 = -x0


class Test_weak_wolfe:
    def test_unit_step(self) -> None:
        result = line_search.weak_wolfe(sphere, sphere_grad, x0, d0)
        assert result.reason == line_search.Reason.WEAK_WOLFE
        assert result.step == 1.0
        assert result.iter == 1
        assert result.fval == 0

    def test_bisection(self) -> None:
        result = line_search.weak_wolfe(sphere, sphere_grad, x0, d0, 4.0)
        # 4 -> 2 -> 1
        assert result.reason == line_search.Reason.WEAK_WOLFE
        assert result.step == 1.0
        assert result.iter == 3

    def test_expansion(self) -> None:
        result = line_search.weak_wolfe(sphere, sphere_grad, x0, d0, 0.01)
        # 0.01 -> 0.02 -> 0.04 -> 0.08 -> 0.16
        assert result.reason == line_search.Reason.WEAK_WOLFE
        assert math.fabs(result.step - 0.16) < 1e-12
        assert result.iter == 5
        assert result.fval < sphere(x0)

    def test_lack_of_progress(self) -> None:
        result = line_search.weak_wolfe(sphere, sphere_grad, x0, d0, 4.0, tol_step=10.0)
        assert result.reason == line_search.Reason.LACK_OF_PROGRESS
        assert result.step == 0
        assert numpy.all(result.x == x0)

    def test_unbounded(self) -> None:
        with pytest.raises(line_search.Maximum_Iterations_Exceeded) as info:
            line_search.weak_wolfe(
                lambda x: -float(x[0]), lambda x: numpy.array([-1.0]), numpy.zeros(1), numpy.ones(1)
            )
        assert info.value.unbounded
        assert isinstance(info.value, line_search.Line_Search_Failed)

    def test_bounded_exhaustion(self) -> None:
        with pytest.raises(line_search.Maximum_Iterations_Exceeded) as info:
            line_search.weak_wolfe(sphere, sphere_grad, x0, d0, 1.0e6, max_iter=2)
        assert not info.value.unbounded

    def test_evaluation_failed(self) -> None:
        def f(x: ndarray) -> float:
            return math.nan if x[0] < 0 else 0.5 * float(x @ x)

        with pytest.raises(line_search.Evaluation_Failed):
            line_search.weak_wolfe(f, sphere_grad, numpy.ones(1), -numpy.ones(1), 4.0)

    def test_arguments(self) -> None:
        with pytest.raises(ValueError):
            line_search.weak_wolfe(sphere, sphere_grad, x0, -d0)
        with pytest.raises(ValueError):
            line_search.weak_wolfe(sphere, sphere_grad, x0, d0, c1=0.9, c2=0.5)
        with pytest.raises(ValueError):
            line_search.weak_wolfe(sphere, sphere_grad, x0, numpy.ones(3))
        with pytest.raises(TypeError):
            line_search.weak_wolfe(None, sphere_grad, x0, d0)  # type: ignore

    def test_objective_model(self) -> None:
        model = ObjectiveModel(lambda p: numpy.array([10 * (p[1] - p[0] * p[0]), 1 - p[0]]))
        model.set_parameters(numpy.array([-1.2, 1.0]))
        objective, gradient = model.to_objective_function()
        x = model.initial_point()
        result = line_search.weak_wolfe(objective, gradient, x, -gradient(x), max_iter=50)
        assert result.reason == line_search.Reason.WEAK_WOLFE
        assert result.fval < objective(x)


if __name__ == "__main__":
    Test_weak_wolfe().test_unit_step()
    Test_weak_wolfe().test_bisection()
    Test_weak_wolfe().test_expansion()
    Test_weak_wolfe().test_lack_of_progress()
    Test_weak_wolfe().test_unbounded()
    Test_weak_wolfe().test_bounded_exhaustion()
    Test_weak_wolfe().test_evaluation_failed()
    Test_weak_wolfe().test_arguments()
    Test_weak_wolfe().test_objective_model()
