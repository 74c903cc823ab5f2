import math

import numpy as np
import pytest

from sketchsolve.constraints import (
    LevenbergMarquardt,
    NotConvergedError,
    PointOnPoint,
    PointOnSection,
    PointPointDistance,
    PointSectionDistance,
    SectionCircleDistance,
    SectionOnCircle,
    SectionSectionAngle,
    SectionSectionParallel,
    SectionSectionPerpendicular,
    VariableStore,
)
from sketchsolve.model import Circle, Point, Rectangle, Section


def test_store_returns_same_variable_for_same_attribute():
    store = VariableStore()
    p = Point(1, 2)
    assert store.add(p, "x") is store.add(p, "x")
    assert len(store) == 1


def test_store_get_missing_raises():
    store = VariableStore()
    with pytest.raises(KeyError):
        store.get(Point(), "x")


def test_store_values_and_assign_round_trip():
    store = VariableStore()
    p = Point(1.5, -2.5)
    store.add(p, "x")
    store.add(p, "y")
    assert list(store.values()) == [1.5, -2.5]
    store.assign([4.0, 6.0])
    assert (p.x, p.y) == (4.0, 6.0)


def test_store_assign_wrong_length_raises():
    store = VariableStore()
    store.add(Point(), "x")
    with pytest.raises(ValueError):
        store.assign([1.0, 2.0])


def test_store_clear_empties():
    store = VariableStore()
    PointOnPoint(Point(), Point(), store)
    store.clear()
    assert len(store) == 0


def test_shared_point_registered_once():
    store = VariableStore()
    shared = Point(0, 0)
    PointPointDistance(shared, Point(1, 0), 1, store)
    PointPointDistance(shared, Point(0, 1), 1, store)
    assert len(store) == 6


def test_point_point_distance_residual_zero_when_held():
    c = PointPointDistance(Point(0, 0), Point(3, 4), 5)
    assert c.residual()[0] == pytest.approx(0.0)


def test_point_section_distance_matches_given_distance():
    section = Section(Point(-10, 0), Point(10, 0))
    c = PointSectionDistance(Point(3, 20), section, 20)
    assert c.residual()[0] == pytest.approx(0.0)


def test_point_on_section_beyond_end_is_positive():
    section = Section(Point(0, 0), Point(10, 0))
    assert PointOnSection(Point(5, 0), section).residual()[0] == pytest.approx(0.0)
    assert PointOnSection(Point(15, 0), section).residual()[0] > 0


def test_section_on_circle_tangent_holds():
    section = Section(Point(-10, 5), Point(10, 5))
    circle = Circle(Point(0, 0), 5)
    assert SectionOnCircle(section, circle).residual()[0] == pytest.approx(0.0)
    assert SectionCircleDistance(section, circle, 0).residual()[0] == pytest.approx(0.0)


def test_params_order_and_rectangle():
    a, b = Point(0, 0), Point(3, 4)
    c = PointPointDistance(a, b, 5)
    assert c.params() == [(a, "x"), (a, "y"), (b, "x"), (b, "y")]
    assert c.rectangle() == Rectangle(0, 0, 3, 4)


def test_circle_constraints_include_radius():
    circle = Circle(Point(0, 0), 2)
    c = SectionOnCircle(Section(Point(0, 3), Point(1, 3)), circle)
    assert (circle, "radius") in c.params()


def _solve(*builders):
    store = VariableStore()
    constraints = [build(store) for build in builders]
    solver = LevenbergMarquardt()
    solver.optimize(constraints, store)
    return solver


def test_solver_reaches_distance():
    a, b = Point(0, 0), Point(3, 0)
    solver = _solve(lambda s: PointPointDistance(a, b, 5, s))
    assert solver.converged
    assert solver.error <= solver.tolerance
    assert math.hypot(a.x - b.x, a.y - b.y) == pytest.approx(5, abs=1e-6)


def test_solver_makes_sections_perpendicular():
    s1 = Section(Point(0, 0), Point(10, 0))
    s2 = Section(Point(0, 0), Point(10, 3))
    _solve(lambda s: SectionSectionPerpendicular(s1, s2, s))
    d1 = np.array([s1.end.x - s1.beg.x, s1.end.y - s1.beg.y])
    d2 = np.array([s2.end.x - s2.beg.x, s2.end.y - s2.beg.y])
    assert abs(d1 @ d2) < 1e-6


def test_solver_makes_sections_parallel():
    s1 = Section(Point(0, 0), Point(10, 0))
    s2 = Section(Point(0, 5), Point(10, 8))
    _solve(lambda s: SectionSectionParallel(s1, s2, s))
    cross = (s1.end.x - s1.beg.x) * (s2.end.y - s2.beg.y) - (s1.end.y - s1.beg.y) * (s2.end.x - s2.beg.x)
    assert abs(cross) < 1e-6


def test_solver_reaches_angle():
    s1 = Section(Point(0, 0), Point(10, 0))
    s2 = Section(Point(0, 0), Point(10, 3))
    _solve(lambda s: SectionSectionAngle(s1, s2, 60, s))
    ax, ay = s1.end.x - s1.beg.x, s1.end.y - s1.beg.y
    bx, by = s2.end.x - s2.beg.x, s2.end.y - s2.beg.y
    angle = math.degrees(math.atan2(ax * by - ay * bx, ax * bx + ay * by))
    assert angle == pytest.approx(60, abs=1e-5)


def test_solver_joins_points():
    a, b = Point(1, 2), Point(5, 7)
    _solve(lambda s: PointOnPoint(a, b, s))
    assert a.x == pytest.approx(b.x, abs=1e-9)
    assert a.y == pytest.approx(b.y, abs=1e-9)


def test_contradictory_requirements_leave_error():
    a, b = Point(0, 0), Point(3, 0)
    solver = _solve(
        lambda s: PointPointDistance(a, b, 5, s),
        lambda s: PointPointDistance(a, b, 10, s),
    )
    assert solver.error > solver.tolerance


def test_not_converged_error_is_runtime_error_with_message():
    err = NotConvergedError("Not converged")
    assert isinstance(err, RuntimeError)
    assert str(err) == "Not converged"