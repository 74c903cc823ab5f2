"""Reading and writing the plain-text sketch file format."""

from __future__ import annotations

from collections import deque
from collections.abc import Iterable
from pathlib import Path

from .model import Circle, Point, RequirementData, RequirementType, Section, Shape
from .records import ObjectRecord, RequirementRecord


class OurPFile:
    """A collection of element and requirement records with their text form."""

    def __init__(
        self,
        objects: Iterable[ObjectRecord] = (),
        requirements: Iterable[RequirementRecord] = (),
    ) -> None:
        self.objects: list[ObjectRecord] = list(objects)
        self.requirements: list[RequirementRecord] = list(requirements)

    def add_object(self, object_id: int, shape: Shape) -> None:
        self.objects.append(ObjectRecord(object_id, shape))

    def add_requirement(self, requirement_id: int, requirement: RequirementData) -> None:
        self.requirements.append(RequirementRecord(requirement_id, requirement))

    def to_string(self) -> str:
        """Render all records, each section sorted by id."""
        lines = ["Elements: {"]
        lines += [o.to_string() for o in sorted(self.objects, key=lambda o: o.id)]
        lines += ["}", "Requirements: {"]
        lines += [r.to_string() for r in sorted(self.requirements, key=lambda r: r.id)]
        lines.append("}")
        return "\n".join(lines) + "\n"

    def save(self, path: str | Path) -> None:
        Path(path).write_text(self.to_string())

    def load(self, path: str | Path) -> None:
        self.load_string(Path(path).read_text())

    def load_string(self, text: str) -> None:
        """Replace the records with those parsed from ``text``."""
        objects: list[ObjectRecord] = []
        requirements: list[RequirementRecord] = []
        pending: deque[ObjectRecord] = deque()

        def take_points(count: int) -> list[Point]:
            if len(pending) < count:
                raise ValueError("Invalid file format: shape without its points")
            while len(pending) > count:
                objects.append(pending.popleft())
            taken = list(pending)
            objects.extend(taken)
            pending.clear()
            return [record.shape for record in taken]

        lines = iter(text.splitlines())
        for line in lines:
            if "ID" not in line:
                continue
            object_id = _read_id(line)
            tokens = next(lines, "").split()
            if not tokens:
                continue
            kind, values = tokens[0], tokens[1:]
            if kind == "addreq":
                if len(values) < 4:
                    raise ValueError(f"Invalid requirement line for ID {object_id}")
                requirement = RequirementData(
                    RequirementType(int(values[0][0])),
                    [int(values[1]), int(values[2])],
                    [float(values[3])],
                )
                requirements.append(RequirementRecord(object_id, requirement))
            elif kind == "point":
                x, y = (float(v) for v in values[:2])
                pending.append(ObjectRecord(object_id, Point(x, y)))
            elif kind == "section":
                beg, end = take_points(2)
                objects.append(ObjectRecord(object_id, Section(beg, end)))
            elif kind == "circle":
                (center,) = take_points(1)
                objects.append(ObjectRecord(object_id, Circle(center, float(values[0]))))

        objects.extend(pending)
        self.objects = objects
        self.requirements = requirements


def _read_id(line: str) -> int:
    tokens = line.split()
    if len(tokens) < 2:
        raise ValueError(f"Invalid ID line: {line!r}")
    try:
        return int(tokens[1])
    except ValueError:
        raise ValueError(f"Invalid ID line: {line!r}") from None