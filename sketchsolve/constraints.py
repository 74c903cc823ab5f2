"""Requirement residuals and a Levenberg-Marquardt solver over shape coordinates."""

from __future__ import annotations

import math
from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from typing import Any

import numpy as np

from .model import Circle, Point, Rectangle, Section


class NotConvergedError(RuntimeError):
    """Raised when a set of requirements cannot be satisfied."""


@dataclass(frozen=True, eq=False)
class Variable:
    """A named numeric attribute of a shape, read and written in place."""

    owner: Any
    attribute: str

    @property
    def value(self) -> float:
        return float(getattr(self.owner, self.attribute))

    @value.setter
    def value(self, new: float) -> None:
        setattr(self.owner, self.attribute, float(new))


class VariableStore:
    """The unique variables shared by a set of constraints."""

    def __init__(self) -> None:
        self._variables: dict[tuple[int, str], Variable] = {}

    def __len__(self) -> int:
        return len(self._variables)

    def add(self, owner: Any, attribute: str) -> Variable:
        """Return the variable for ``owner.attribute``, creating it once."""
        key = (id(owner), attribute)
        if key not in self._variables:
            self._variables[key] = Variable(owner, attribute)
        return self._variables[key]

    def get(self, owner: Any, attribute: str) -> Variable:
        try:
            return self._variables[(id(owner), attribute)]
        except KeyError:
            raise KeyError(f"variable not found: {attribute}") from None

    def values(self) -> np.ndarray:
        return np.array([v.value for v in self._variables.values()], dtype=float)

    def assign(self, values: Iterable[float]) -> None:
        for variable, value in zip(self._variables.values(), values, strict=True):
            variable.value = value

    def clear(self) -> None:
        self._variables.clear()


def _point_params(p: Point) -> list[tuple[Any, str]]:
    return [(p, "x"), (p, "y")]


def _section_params(s: Section) -> list[tuple[Any, str]]:
    return _point_params(s.beg) + _point_params(s.end)


def _circle_params(c: Circle) -> list[tuple[Any, str]]:
    return _point_params(c.center) + [(c, "radius")]


def _line_distance(px: float, py: float, s: Section) -> float:
    """Distance from (px, py) to the infinite line through a section."""
    dx = s.end.x - s.beg.x
    dy = s.end.y - s.beg.y
    length = math.hypot(dx, dy)
    if length == 0.0:
        return math.hypot(px - s.beg.x, py - s.beg.y)
    return abs(dx * (py - s.beg.y) - dy * (px - s.beg.x)) / length


def _segment_distance(px: float, py: float, s: Section) -> float:
    """Distance from (px, py) to the closest point of a section."""
    dx = s.end.x - s.beg.x
    dy = s.end.y - s.beg.y
    squared = dx * dx + dy * dy
    if squared == 0.0:
        return math.hypot(px - s.beg.x, py - s.beg.y)
    t = ((px - s.beg.x) * dx + (py - s.beg.y) * dy) / squared
    t = max(0.0, min(1.0, t))
    return math.hypot(px - (s.beg.x + t * dx), py - (s.beg.y + t * dy))


def _directions(s1: Section, s2: Section) -> tuple[float, float, float, float]:
    return (
        s1.end.x - s1.beg.x,
        s1.end.y - s1.beg.y,
        s2.end.x - s2.beg.x,
        s2.end.y - s2.beg.y,
    )


class Constraint(ABC):
    """A requirement expressed as residuals that vanish when it holds."""

    def __init__(self, store: VariableStore | None = None) -> None:
        self.variables: list[Variable] = (
            [store.add(owner, attr) for owner, attr in self.params()] if store is not None else []
        )

    @abstractmethod
    def residual(self) -> np.ndarray:
        """Residuals at the shapes' current coordinates."""

    @abstractmethod
    def params(self) -> list[tuple[Any, str]]:
        """The (owner, attribute) pairs the constraint depends on."""

    @abstractmethod
    def rectangle(self) -> Rectangle:
        """Bounding box of the shapes involved."""


class PointSectionDistance(Constraint):
    """A point lies at a given distance from the line of a section."""

    def __init__(self, point: Point, section: Section, distance: float, store: VariableStore | None = None):
        self.point = point
        self.section = section
        self.distance = float(distance)
        super().__init__(store)

    def residual(self) -> np.ndarray:
        return np.array([_line_distance(self.point.x, self.point.y, self.section) - self.distance])

    def params(self) -> list[tuple[Any, str]]:
        return _point_params(self.point) + _section_params(self.section)

    def rectangle(self) -> Rectangle:
        return self.section.rect() | self.point.rect()


class PointOnSection(Constraint):
    """A point lies on a section."""

    def __init__(self, point: Point, section: Section, store: VariableStore | None = None):
        self.point = point
        self.section = section
        super().__init__(store)

    def residual(self) -> np.ndarray:
        return np.array([_segment_distance(self.point.x, self.point.y, self.section)])

    def params(self) -> list[tuple[Any, str]]:
        return _point_params(self.point) + _section_params(self.section)

    def rectangle(self) -> Rectangle:
        return self.section.rect() | self.point.rect()


class PointPointDistance(Constraint):
    """Two points lie a given distance apart."""

    def __init__(self, first: Point, second: Point, distance: float, store: VariableStore | None = None):
        self.first = first
        self.second = second
        self.distance = float(distance)
        super().__init__(store)

    def residual(self) -> np.ndarray:
        gap = math.hypot(self.first.x - self.second.x, self.first.y - self.second.y)
        return np.array([gap - self.distance])

    def params(self) -> list[tuple[Any, str]]:
        return _point_params(self.first) + _point_params(self.second)

    def rectangle(self) -> Rectangle:
        return self.first.rect() | self.second.rect()


class PointOnPoint(Constraint):
    """Two points coincide."""

    def __init__(self, first: Point, second: Point, store: VariableStore | None = None):
        self.first = first
        self.second = second
        super().__init__(store)

    def residual(self) -> np.ndarray:
        return np.array([self.first.x - self.second.x, self.first.y - self.second.y])

    def params(self) -> list[tuple[Any, str]]:
        return _point_params(self.first) + _point_params(self.second)

    def rectangle(self) -> Rectangle:
        return self.second.rect() | self.first.rect()


class SectionCircleDistance(Constraint):
    """The line of a section lies a given distance outside a circle."""

    def __init__(self, section: Section, circle: Circle, distance: float, store: VariableStore | None = None):
        self.section = section
        self.circle = circle
        self.distance = float(distance)
        super().__init__(store)

    def residual(self) -> np.ndarray:
        c = self.circle
        gap = _line_distance(c.center.x, c.center.y, self.section) - c.radius
        return np.array([gap - self.distance])

    def params(self) -> list[tuple[Any, str]]:
        return _circle_params(self.circle) + _section_params(self.section)

    def rectangle(self) -> Rectangle:
        return self.section.rect() | self.circle.rect()


class SectionOnCircle(Constraint):
    """The line of a section touches a circle."""

    def __init__(self, section: Section, circle: Circle, store: VariableStore | None = None):
        self.section = section
        self.circle = circle
        super().__init__(store)

    def residual(self) -> np.ndarray:
        c = self.circle
        return np.array([_line_distance(c.center.x, c.center.y, self.section) - c.radius])

    def params(self) -> list[tuple[Any, str]]:
        return _circle_params(self.circle) + _section_params(self.section)

    def rectangle(self) -> Rectangle:
        return self.section.rect() | self.circle.rect()


class _SectionPair(Constraint):
    def __init__(self, first: Section, second: Section, store: VariableStore | None = None):
        self.first = first
        self.second = second
        super().__init__(store)

    def params(self) -> list[tuple[Any, str]]:
        return _section_params(self.first) + _section_params(self.second)

    def rectangle(self) -> Rectangle:
        return self.first.rect() | self.second.rect()


class SectionSectionParallel(_SectionPair):
    """Two sections are parallel: the cross product of their directions vanishes."""

    def residual(self) -> np.ndarray:
        ax, ay, bx, by = _directions(self.first, self.second)
        return np.array([ax * by - ay * bx])


class SectionSectionPerpendicular(_SectionPair):
    """Two sections are perpendicular: the dot product of their directions vanishes."""

    def residual(self) -> np.ndarray:
        ax, ay, bx, by = _directions(self.first, self.second)
        return np.array([ax * bx + ay * by])


class SectionSectionAngle(_SectionPair):
    """The angle from the first section to the second equals ``angle`` degrees."""

    def __init__(self, first: Section, second: Section, angle: float, store: VariableStore | None = None):
        self.angle = float(angle)
        super().__init__(first, second, store)

    def residual(self) -> np.ndarray:
        ax, ay, bx, by = _directions(self.first, self.second)
        actual = math.atan2(ax * by - ay * bx, ax * bx + ay * by)
        diff = actual - math.radians(self.angle)
        return np.array([(diff + math.pi) % (2 * math.pi) - math.pi])


_ERROR_FLOOR = 1e-24
_STEP_FLOOR = 1e-15
_MAX_DAMPING = 1e20
_MIN_DAMPING = 1e-15


class LevenbergMarquardt:
    """Damped least-squares solver that moves shape coordinates in place."""

    def __init__(
        self,
        damping: float = 0.5,
        decrease: float = 2.0,
        increase: float = 4.0,
        tolerance: float = 1e-6,
        gradient_tolerance: float = 1e-6,
        max_iterations: int = 10000,
    ) -> None:
        self.damping = damping
        self.decrease = decrease
        self.increase = increase
        self.tolerance = tolerance
        self.gradient_tolerance = gradient_tolerance
        self.max_iterations = max_iterations
        self.converged = False
        self.error = 0.0
        self.iterations = 0

    @staticmethod
    def _residuals(constraints: Sequence[Constraint], store: VariableStore, x: np.ndarray) -> np.ndarray:
        store.assign(x)
        return np.concatenate([np.atleast_1d(np.asarray(c.residual(), dtype=float)) for c in constraints])

    def _jacobian(self, constraints: Sequence[Constraint], store: VariableStore, x: np.ndarray, size: int) -> np.ndarray:
        jac = np.empty((size, x.size))
        for j, xj in enumerate(x):
            h = 1e-7 * max(1.0, abs(xj))
            forward = x.copy()
            backward = x.copy()
            forward[j] += h
            backward[j] -= h
            jac[:, j] = (
                self._residuals(constraints, store, forward) - self._residuals(constraints, store, backward)
            ) / (2 * h)
        return jac

    def optimize(self, constraints: Sequence[Constraint], store: VariableStore) -> float:
        """Minimise the squared residuals; return the final error (sum of squares)."""
        constraints = list(constraints)
        self.iterations = 0
        if not constraints:
            self.converged = True
            self.error = 0.0
            return self.error
        x = store.values()
        r = self._residuals(constraints, store, x)
        err = float(r @ r)
        if x.size == 0:
            self.converged = err <= self.tolerance
            self.error = err
            return err

        damping = self.damping
        converged = False
        for iteration in range(self.max_iterations):
            self.iterations = iteration + 1
            if err <= _ERROR_FLOOR:
                converged = True
                break
            jac = self._jacobian(constraints, store, x, r.size)
            gradient = jac.T @ r
            if np.max(np.abs(gradient)) <= self.gradient_tolerance * self.tolerance:
                converged = True
                break
            normal = jac.T @ jac
            identity = np.eye(x.size)
            step = None
            while damping <= _MAX_DAMPING:
                try:
                    delta = np.linalg.solve(normal + damping * identity, -gradient)
                except np.linalg.LinAlgError:
                    damping *= self.increase
                    continue
                candidate = x + delta
                r_new = self._residuals(constraints, store, candidate)
                err_new = float(r_new @ r_new)
                if err_new < err:
                    x, r, err, step = candidate, r_new, err_new, delta
                    damping = max(damping / self.decrease, _MIN_DAMPING)
                    break
                damping *= self.increase
            if step is None:
                converged = True
                break
            if np.linalg.norm(step) <= _STEP_FLOOR * (np.linalg.norm(x) + _STEP_FLOOR):
                converged = True
                break

        store.assign(x)
        self.converged = converged
        self.error = err
        return err