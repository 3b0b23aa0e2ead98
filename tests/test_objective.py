# -*- coding: utf-8 -*-
import math

import numpy
import pytest

from trust_lsq._internals.objective.projection import Projection, make_parameter_space
from trust_lsq.objective import ObjectiveModel
from numpy import ndarray

inf = numpy.inf

lower = numpy.array([-1.0, 0.0, -inf, -inf])
upper = numpy.array([2.0, inf, 5.0, inf])
scales = numpy.array([1.0, 0.5, 3.0, 2.0])


def line(p: ndarray, x: ndarray) -> ndarray:
    return p[0] + p[1] * x


def line_jac(p: ndarray, x: ndarray) -> ndarray:
    return numpy.stack([numpy.ones(x.shape), x], axis=1)


def exponential(p: ndarray, x: ndarray) -> ndarray:
    return p[0] * numpy.exp(-p[1] * x)


def exponential_jac(p: ndarray, x: ndarray) -> ndarray:
    e = numpy.exp(-p[1] * x)
    return numpy.stack([e, -p[0] * x * e], axis=1)


class Test_projection:
    def test_round_trip(self) -> None:
        proj = Projection(lower, upper, scales)
        p_ext = numpy.array([1.5, 3.0, -7.0, 11.0])
        p_int = proj.to_internal(p_ext)
        assert numpy.abs(proj.to_external(p_int) - p_ext).max() < 1e-12

    def test_within_bounds(self) -> None:
        proj = Projection(lower, upper, scales)
        numpy.random.seed(0)
        for _ in range(100):
            p_ext = proj.to_external(numpy.random.randn(4) * 10)
            assert numpy.all(lower <= p_ext)
            assert numpy.all(p_ext <= upper)

    def test_derivative(self) -> None:
        proj = Projection(lower, upper, scales)
        numpy.random.seed(1)
        h = 1.0e-6
        for _ in range(100):
            p_int = numpy.random.randn(4)
            numeric = (proj.to_external(p_int + h) - proj.to_external(p_int - h)) / (2 * h)
            assert numpy.abs(proj.derivative(p_int) - numeric).max() < 1e-6


class Test_parameter_space:
    def test_fixed(self) -> None:
        space = make_parameter_space(
            numpy.array([1.0, 2.0, 3.0]),
            numpy.array([0.0, 2.0, -inf]),
            numpy.array([5.0, 2.0, inf]),
            None,
            numpy.array([True, False, False]),
        )
        # 上下界重合的第二个参数同样被固定
        assert space.n_free == 1
        assert list(space.free) == [False, False, True]
        external = space.to_external(numpy.array([-4.0]))
        assert list(external) == [1.0, 2.0, -4.0]

    def test_invalid(self) -> None:
        guess = numpy.array([1.0, 2.0])
        with pytest.raises(TypeError):
            make_parameter_space(None, None, None, None, None)
        with pytest.raises(ValueError):
            make_parameter_space(numpy.array([]), None, None, None, None)
        with pytest.raises(ValueError):
            make_parameter_space(numpy.array([1.0, numpy.nan]), None, None, None, None)
        with pytest.raises(ValueError):
            make_parameter_space(guess, numpy.array([0.0]), None, None, None)
        with pytest.raises(ValueError):
            make_parameter_space(guess, numpy.array([2.0, 0.0]), numpy.array([1.0, 3.0]), None, None)
        with pytest.raises(ValueError):
            make_parameter_space(guess, numpy.array([1.5, 0.0]), None, None, None)
        with pytest.raises(ValueError):
            make_parameter_space(guess, None, numpy.array([3.0, 1.0]), None, None)
        with pytest.raises(ValueError):
            make_parameter_space(guess, None, None, numpy.array([1.0, 0.0]), None)
        with pytest.raises(ValueError):
            make_parameter_space(guess, None, None, numpy.array([1.0, inf]), None)
        with pytest.raises(ValueError):
            make_parameter_space(guess, None, None, None, numpy.array([True, True]))


class Test_objective_model:
    def test_none(self) -> None:
        with pytest.raises(TypeError):
            ObjectiveModel(None)  # type: ignore
        with pytest.raises(TypeError):
            ObjectiveModel(line, 1.0)  # type: ignore

    def test_weighted_rss(self) -> None:
        x = numpy.array([0.0, 1.0, 2.0])
        y = numpy.array([1.0, 2.0, 4.0])
        w = numpy.array([1.0, 4.0, 0.25])
        model = ObjectiveModel(line)
        model.set_observed(x, y, w)
        model.set_parameters(numpy.array([1.0, 1.0]))
        ev = model.evaluate_at(model.initial_point())
        # 残差 y - f = [0, 0, 1]，加权后为 [0, 0, 0.5]
        assert numpy.abs(ev.residuals - numpy.array([0.0, 0.0, 0.5])).max() < 1e-12
        assert math.fabs(ev.rss - 0.25) < 1e-12
        assert model.function_evaluations == 1

    def test_observed_errors(self) -> None:
        model = ObjectiveModel(line)
        with pytest.raises(ValueError):
            model.set_observed(numpy.zeros(3), numpy.zeros(2))
        with pytest.raises(ValueError):
            model.set_observed(numpy.zeros(2), numpy.zeros(2), numpy.zeros(2))
        with pytest.raises(TypeError):
            model.set_observed(None, numpy.zeros(2))  # type: ignore

    def test_numerical_jacobian(self) -> None:
        x = numpy.linspace(0.0, 4.0, 9)
        y = exponential(numpy.array([2.0, 0.7]), x)
        for order in range(1, 7):
            model = ObjectiveModel(exponential, accuracy_order=order)
            model.set_observed(x, y)
            model.set_parameters(numpy.array([1.5, 0.5]))
            ev = model.evaluate_at(model.initial_point())
            numeric = model.numerical_jacobian(ev)
            expected = exponential_jac(ev.parameters, x)
            tol = 1e-4 if order == 1 else 1e-7
            assert numpy.abs(numeric - expected).max() < tol

    def test_gradient(self) -> None:
        # g = -J'W(y - f) = J_R' R
        x = numpy.linspace(0.0, 4.0, 9)
        numpy.random.seed(0)
        y = exponential(numpy.array([2.0, 0.7]), x) + 0.01 * numpy.random.randn(9)
        w = numpy.linspace(0.5, 2.0, 9)
        model = ObjectiveModel(exponential, exponential_jac)
        model.set_observed(x, y, w)
        model.set_parameters(
            numpy.array([1.5, 0.5]), lower_bound=numpy.array([0.0, 0.0]), scales=numpy.array([2.0, 1.0])
        )
        objective, gradient = model.to_objective_function()
        p = model.initial_point()
        h = 1.0e-6
        numeric = numpy.array(
            [
                (objective(p + h * e) - objective(p - h * e)) / (2 * h)
                for e in numpy.eye(2)
            ]
        )
        assert numpy.abs(gradient(p) - numeric).max() < 1e-6

        sol = model.linearize(model.evaluate_at(p))
        J = sol.jacobian
        assert numpy.abs(sol.hessian.value - J.T @ J).max() < 1e-12
        assert not sol.hessian.ill
        assert model.jacobian_evaluations == 2

    def test_statistics(self) -> None:
        x = numpy.array([0.0, 1.0, 2.0, 3.0, 4.0])
        y = numpy.array([1.1, 2.9, 5.2, 6.8, 9.1])
        model = ObjectiveModel(line, line_jac)
        model.set_observed(x, y)
        A = line_jac(numpy.zeros(2), x)
        p: ndarray = numpy.linalg.lstsq(A, y, rcond=None)[0]
        model.set_parameters(p)
        ev = model.evaluate_at(model.initial_point())
        stats = model.statistics(ev)
        dof = 3
        expected = numpy.linalg.inv(A.T @ A) * ev.rss / dof
        assert stats.degree_of_freedom == dof
        assert numpy.abs(stats.covariance - expected).max() < 1e-12
        assert numpy.abs(stats.standard_errors - numpy.sqrt(numpy.diag(expected))).max() < 1e-12
        assert numpy.abs(numpy.diag(stats.correlation) - 1).max() < 1e-12

    def test_statistics_invalid_jacobian(self) -> None:
        def nan_jac(p: ndarray, x: ndarray) -> ndarray:
            J = line_jac(p, x)
            J[0, 1] = numpy.nan
            return J

        x = numpy.array([0.0, 1.0, 2.0, 3.0, 4.0])
        y = numpy.array([1.1, 2.9, 5.2, 6.8, 9.1])
        model = ObjectiveModel(line, nan_jac)
        model.set_observed(x, y)
        model.set_parameters(numpy.array([1.0, 2.0]))
        ev = model.evaluate_at(model.initial_point())
        assert math.isfinite(ev.rss)
        stats = model.statistics(ev)
        assert stats.degree_of_freedom == 3
        assert numpy.all(numpy.isnan(stats.covariance))
        assert numpy.all(numpy.isnan(stats.standard_errors))

    def test_number_of_observations(self) -> None:
        model = ObjectiveModel(line)
        assert model.number_of_observations == 0
        model.set_observed(numpy.zeros(4), numpy.ones(4))
        assert model.number_of_observations == 4

    def test_parameter_conversion(self) -> None:
        model = ObjectiveModel(line)
        model.set_parameters(
            numpy.array([0.5, 3.0, 7.0]),
            lower_bound=numpy.array([0.0, -inf, -inf]),
            upper_bound=numpy.array([1.0, inf, inf]),
            is_fixed=numpy.array([False, False, True]),
        )
        p_int = model.initial_point()
        assert p_int.shape == (2,)
        assert numpy.abs(model.to_internal(numpy.array([0.5, 3.0, 7.0])) - p_int).max() < 1e-12
        external = model.to_external(p_int)
        assert numpy.abs(external - numpy.array([0.5, 3.0, 7.0])).max() < 1e-12
        # 固定参数始终取初值
        moved = model.to_external(p_int + 1.0)
        assert moved[2] == 7.0
        assert 0.0 <= moved[0] <= 1.0

    def test_parameters_not_set(self) -> None:
        model = ObjectiveModel(line)
        with pytest.raises(ValueError):
            model.initial_point()

    def test_wrong_point(self) -> None:
        model = ObjectiveModel(line)
        model.set_observed(numpy.zeros(2), numpy.zeros(2))
        model.set_parameters(numpy.array([1.0, 1.0]))
        with pytest.raises(ValueError):
            model.evaluate_at(numpy.zeros(3))
        with pytest.raises(ValueError):
            model.evaluate_at(numpy.array([numpy.inf, 0.0]))


if __name__ == "__main__":
    Test_projection().test_round_trip()
    Test_projection().test_within_bounds()
    Test_projection().test_derivative()
    Test_parameter_space().test_fixed()
    Test_parameter_space().test_invalid()
    Test_objective_model().test_none()
    Test_objective_model().test_weighted_rss()
    Test_objective_model().test_observed_errors()
    Test_objective_model().test_numerical_jacobian()
    Test_objective_model().test_gradient()
    Test_objective_model().test_statistics()
    Test_objective_model().test_statistics_invalid_jacobian()
    Test_objective_model().test_number_of_observations()
    Test_objective_model().test_parameter_conversion()
    Test_objective_model().test_parameters_not_set()
    Test_objective_model().test_wrong_point()
