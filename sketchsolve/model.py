"""Geometric primitives and the plain data records that describe them."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import IntEnum
from typing import ClassVar, Union


class ElementType(IntEnum):
    """Kinds of drawable element."""

    POINT = 0
    SECTION = 1
    CIRCLE = 2


class RequirementType(IntEnum):
    """Kinds of geometric requirement; values are those used in saved files."""

    POINT_SECTION_DISTANCE = 0
    POINT_ON_SECTION = 1
    POINT_POINT_DISTANCE = 2
    POINT_ON_POINT = 3
    SECTION_CIRCLE_DISTANCE = 4
    SECTION_ON_CIRCLE = 5
    SECTION_IN_CIRCLE = 6
    SECTION_SECTION_PARALLEL = 7
    SECTION_SECTION_PERPENDICULAR = 8
    SECTION_SECTION_ANGLE = 9
    POINT_IN_OBJECT = 10


@dataclass(frozen=True)
class Rectangle:
    """Axis-aligned bounding box; ``a | b`` is the box holding both."""

    x_1: float
    y_1: float
    x_2: float
    y_2: float

    def __or__(self, other: Rectangle) -> Rectangle:
        if not isinstance(other, Rectangle):
            return NotImplemented
        xs = (self.x_1, self.x_2, other.x_1, other.x_2)
        ys = (self.y_1, self.y_2, other.y_1, other.y_2)
        return Rectangle(min(xs), min(ys), max(xs), max(ys))


@dataclass(eq=False)
class Point:
    """A mutable point; shapes share points by reference."""

    x: float = 0.0
    y: float = 0.0

    element_type: ClassVar[ElementType] = ElementType.POINT

    def rect(self) -> Rectangle:
        return Rectangle(self.x, self.y, self.x, self.y)


@dataclass(eq=False)
class Section:
    """A line segment between two shared points."""

    beg: Point = field(default_factory=Point)
    end: Point = field(default_factory=Point)

    element_type: ClassVar[ElementType] = ElementType.SECTION

    def rect(self) -> Rectangle:
        return self.beg.rect() | self.end.rect()


@dataclass(eq=False)
class Circle:
    """A circle around a shared centre point."""

    center: Point = field(default_factory=Point)
    radius: float = 0.0

    element_type: ClassVar[ElementType] = ElementType.CIRCLE

    def rect(self) -> Rectangle:
        c = self.center
        r = self.radius
        return Rectangle(c.x - r, c.y - r, c.x + r, c.y + r)


Shape = Union[Point, Section, Circle]


@dataclass
class ElementData:
    """Type and coordinates of an element, as exchanged with callers."""

    et: ElementType = ElementType.POINT
    params: list[float] = field(default_factory=list)


@dataclass
class RequirementData:
    """A requirement: its type, the element ids it binds and its parameters."""

    req: RequirementType = RequirementType.POINT_SECTION_DISTANCE
    objects: list[int] = field(default_factory=list)
    params: list[float] = field(default_factory=list)