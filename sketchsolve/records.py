"""Text records for one element or one requirement in a sketch file."""

from __future__ import annotations

from dataclasses import dataclass

from .model import Circle, Point, RequirementData, Section, Shape


@dataclass(frozen=True)
class ObjectRecord:
    """An element and its id, as written to a sketch file."""

    id: int
    shape: Shape

    def to_string(self) -> str:
        shape = self.shape
        if isinstance(shape, Point):
            body = f"point {shape.x:f} {shape.y:f}"
        elif isinstance(shape, Section):
            body = "section"
        elif isinstance(shape, Circle):
            body = f"circle {shape.radius:f}"
        else:
            raise TypeError(f"unsupported shape: {type(shape).__name__}")
        return f"{{\nID {self.id}\n{body}\n}}"

    def to_pair(self) -> tuple[int, Shape]:
        return self.id, self.shape


@dataclass(frozen=True)
class RequirementRecord:
    """A requirement and its id, as written to a sketch file."""

    id: int
    requirement: RequirementData

    def to_string(self) -> str:
        req = self.requirement
        first, second = req.objects[0], req.objects[1]
        param = f"{req.params[0]:f}" if req.params else "0"
        return f"{{\nID {self.id}\naddreq {int(req.req)} {first} {second} {param}\n}}"

    def to_pair(self) -> tuple[int, RequirementData]:
        return self.id, self.requirement