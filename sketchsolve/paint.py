"""A sketch of points, sections and circles kept consistent by requirements."""

from __future__ import annotations

import copy
from collections.abc import Iterator, Mapping
from itertools import combinations
from pathlib import Path
from typing import Any, Optional, TypeVar

from .bmp import BMPPainter
from .constraints import (
    Constraint,
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
from .graph import ConstraintGraph
from .history import Action, UndoRedo
from .model import (
    Circle,
    ElementData,
    ElementType,
    Point,
    Rectangle,
    RequirementData,
    RequirementType,
    Section,
)
from .ourp import OurPFile

_INITIAL_BOUNDS = Rectangle(10, 10, 10, 10)
_MAX_ERROR = 1e-6
_PARAMETER_COUNT = {ElementType.POINT: 2, ElementType.SECTION: 4, ElementType.CIRCLE: 3}

_S = TypeVar("_S")


def _take(params: list[float], count: int, kind: str) -> list[float]:
    if len(params) < count:
        raise ValueError(f"a {kind} needs {count} parameters, got {len(params)}")
    return params[:count]


def _parameter(requirement: RequirementData) -> float:
    if not requirement.params:
        raise ValueError(f"requirement {requirement.req!r} needs a parameter")
    return float(requirement.params[0])


def _unique(shapes: Mapping[int, _S]) -> Iterator[_S]:
    """Shapes in id order, each shared object once."""
    seen: set[int] = set()
    for key in sorted(shapes):
        shape = shapes[key]
        if id(shape) not in seen:
            seen.add(id(shape))
            yield shape


def _in_object(container: int, part: int) -> RequirementData:
    return RequirementData(RequirementType.POINT_IN_OBJECT, [container, part])


class Paint:
    """Holds a sketch, solves its requirements and keeps an undo history.

    ``painter`` is any object with ``change_size``, ``draw_point``,
    ``draw_section`` and ``draw_circle`` methods.
    """

    def __init__(self, painter: Any = None) -> None:
        self.painter = painter
        self.history = UndoRedo()
        self.graph = ConstraintGraph()
        self.bounds = _INITIAL_BOUNDS
        self._points: dict[int, Point] = {}
        self._sections: dict[int, Section] = {}
        self._circles: dict[int, Circle] = {}
        self._requirements: dict[int, RequirementData] = {}
        self._max_id = 0

    @property
    def max_id(self) -> int:
        return self._max_id

    def _next_id(self) -> int:
        self._max_id += 1
        return self._max_id

    def _new_point(self, x: float, y: float) -> tuple[int, Point]:
        point = Point(x, y)
        point_id = self._next_id()
        self._points[point_id] = point
        self.graph.add_vertex(point_id)
        return point_id, point

    # Elements

    def add_element(self, element: ElementData) -> int:
        """Add a point, section or circle and return its id."""
        params = [float(v) for v in element.params]
        if element.et == ElementType.POINT:
            x, y = _take(params, 2, "point")
            point_id, point = self._new_point(x, y)
            self.bounds |= point.rect()
            self.history.add(Action([point_id], [], [list(params)]))
            return point_id
        if element.et == ElementType.SECTION:
            x1, y1, x2, y2 = _take(params, 4, "section")
            beg_id, beg = self._new_point(x1, y1)
            end_id, end = self._new_point(x2, y2)
            section = Section(beg, end)
            self.bounds |= section.rect()
            section_id = self._next_id()
            self._sections[section_id] = section
            self.graph.add_vertex(section_id)
            self.graph.add_edge(_in_object(section_id, beg_id), section_id, beg_id)
            self.graph.add_edge(_in_object(section_id, end_id), section_id, end_id)
            self.history.add(Action([beg_id, end_id, section_id], [], [[x1, y1], [x2, y2], list(params)]))
            return section_id
        if element.et == ElementType.CIRCLE:
            x, y, radius = _take(params, 3, "circle")
            center_id, center = self._new_point(x, y)
            circle = Circle(center, radius)
            self.bounds |= circle.rect()
            circle_id = self._next_id()
            self._circles[circle_id] = circle
            self.graph.add_vertex(circle_id)
            self.graph.add_edge(_in_object(circle_id, center_id), circle_id, center_id)
            self.history.add(Action([center_id, circle_id], [], [[x, y], [x, y, radius]]))
            return circle_id
        raise ValueError(f"unknown element type: {element.et!r}")

    def element_info(self, element_id: int) -> ElementData:
        """Type and current coordinates of an element."""
        if element_id in self._points:
            p = self._points[element_id]
            return ElementData(ElementType.POINT, [p.x, p.y])
        if element_id in self._sections:
            s = self._sections[element_id]
            return ElementData(ElementType.SECTION, [s.beg.x, s.beg.y, s.end.x, s.end.y])
        if element_id in self._circles:
            c = self._circles[element_id]
            return ElementData(ElementType.CIRCLE, [c.center.x, c.center.y, c.radius])
        raise KeyError(f"No such element: {element_id}")

    def find_element(self, element: ElementData) -> Optional[int]:
        """Id of the first element of that type with exactly these coordinates, or None."""
        tables: dict[ElementType, Mapping[int, Any]] = {
            ElementType.POINT: self._points,
            ElementType.SECTION: self._sections,
            ElementType.CIRCLE: self._circles,
        }
        if element.et not in tables:
            raise ValueError(f"unknown element type: {element.et!r}")
        size = _PARAMETER_COUNT[element.et]
        wanted = _take([float(v) for v in element.params], size, element.et.name.lower())
        for element_id in sorted(tables[element.et]):
            if self.element_info(element_id).params == wanted:
                return element_id
        return None

    def elements(self) -> list[tuple[int, ElementData]]:
        """All points, then sections, then circles, each in id order."""
        ids = [*sorted(self._points), *sorted(self._sections), *sorted(self._circles)]
        return [(element_id, self.element_info(element_id)) for element_id in ids]

    def _is_element(self, element_id: int) -> bool:
        return element_id in self._points or element_id in self._sections or element_id in self._circles

    def _discard_element(self, element_id: int) -> bool:
        for table in (self._points, self._sections, self._circles):
            if element_id in table:
                del table[element_id]
                return True
        return False

    def _set_coordinates(self, element_id: int, values: list[float]) -> None:
        if element_id in self._points:
            p = self._points[element_id]
            p.x, p.y = values[0], values[1]
        elif element_id in self._sections:
            s = self._sections[element_id]
            s.beg.x, s.beg.y, s.end.x, s.end.y = values[0], values[1], values[2], values[3]
        else:
            c = self._circles[element_id]
            c.center.x, c.center.y = values[0], values[1]

    def move_element(self, current: ElementData, new: ElementData) -> None:
        """Move the element found at ``current`` to ``new`` and re-solve its requirements."""
        element_id = self.find_element(current)
        if element_id is None:
            raise KeyError("No such element")
        params = [float(v) for v in new.params]
        if current.et == ElementType.POINT:
            p = self._points[element_id]
            p.x, p.y = _take(params, 2, "point")
        elif current.et == ElementType.SECTION:
            s = self._sections[element_id]
            s.beg.x, s.beg.y, s.end.x, s.end.y = _take(params, 4, "section")
        else:
            c = self._circles[element_id]
            c.center.x, c.center.y, c.radius = _take(params, 3, "circle")
        self.update_requirement(element_id)

    def parallel_move(self, element_id: int, dx: float, dy: float) -> None:
        """Shift an element by (dx, dy) and re-solve its requirements."""
        if dx == 0 and dy == 0:
            return
        if element_id in self._points:
            moved = [self._points[element_id]]
        elif element_id in self._sections:
            s = self._sections[element_id]
            moved = [s.beg, s.end]
        elif element_id in self._circles:
            moved = [self._circles[element_id].center]
        else:
            raise ValueError("No such element!")
        for point in moved:
            point.x += dx
            point.y += dy
        self.update_requirement(element_id)

    # Requirements

    def _tracked_objects(self) -> list[int]:
        return [o for requirement in self._requirements.values() for o in requirement.objects]

    def add_requirement(self, requirement: RequirementData) -> int:
        """Add a requirement, solve its component and return its id.

        Unknown or mistyped elements raise and leave no trace of the requirement;
        a requirement that cannot be met is recorded, undone and reported with
        NotConvergedError.
        """
        if len(requirement.objects) < 2:
            raise ValueError("a requirement binds two elements")
        requirement = copy.deepcopy(requirement)
        requirement_id = self._max_id + 1
        self._requirements[requirement_id] = requirement
        for element_id in requirement.objects:
            self.graph.add_vertex(element_id)
        for first, second in combinations(requirement.objects, 2):
            self.graph.add_edge(requirement, first, second)

        try:
            objects = self._tracked_objects()
            before = [self.element_info(o).params for o in objects]
            self.update_requirement(requirement.objects[0])
        except (KeyError, ValueError):
            del self._requirements[requirement_id]
            raise
        except NotConvergedError:
            self._record_requirement(objects, before, requirement_id)
            self.undo()
            raise
        self._record_requirement(objects, before, requirement_id)
        return requirement_id

    def _record_requirement(self, objects: list[int], before: list[list[float]], requirement_id: int) -> None:
        after = [self.element_info(o).params for o in objects]
        self._max_id = requirement_id
        self.history.add(Action([*objects, requirement_id], before, after))

    def update_requirement(self, element_id: int) -> None:
        """Solve every requirement in the component connected to ``element_id``."""
        component = self.graph.connected_component(element_id)
        connected = set(component)
        store = VariableStore()
        constraints: list[Constraint] = []
        for requirement in list(self._requirements.values()):
            if not any(o in connected for o in requirement.objects):
                continue
            constraint = self._build(requirement, component, store)
            if constraint is not None:
                constraints.append(constraint)
        if not constraints:
            return

        solver = LevenbergMarquardt(0.5, 2, 4, 1e-6, 1e-6, 10000)
        error = solver.optimize(constraints, store)
        for constraint in constraints:
            self.bounds |= constraint.rectangle()
        if not solver.converged or error > _MAX_ERROR:
            raise NotConvergedError("Not converged")

    @staticmethod
    def _lookup(
        requirement: RequirementData,
        first_table: Mapping[int, Any],
        second_table: Mapping[int, Any],
        message: str,
        either_order: bool,
    ) -> tuple[Any, Any]:
        a, b = requirement.objects[0], requirement.objects[1]
        try:
            return first_table[a], second_table[b]
        except KeyError:
            if not either_order:
                raise ValueError(message) from None
        try:
            return first_table[b], second_table[a]
        except KeyError:
            raise ValueError(message) from None

    def _build(
        self, requirement: RequirementData, component: list[int], store: VariableStore
    ) -> Optional[Constraint]:
        kind = requirement.req
        if kind in (RequirementType.POINT_SECTION_DISTANCE, RequirementType.POINT_ON_SECTION):
            point, section = self._lookup(
                requirement, self._points, self._sections, "No such point or section", True
            )
            if kind == RequirementType.POINT_SECTION_DISTANCE:
                return PointSectionDistance(point, section, _parameter(requirement), store)
            return PointOnSection(point, section, store)
        if kind == RequirementType.POINT_POINT_DISTANCE:
            first, second = self._lookup(requirement, self._points, self._points, "No such point", False)
            return PointPointDistance(first, second, _parameter(requirement), store)
        if kind == RequirementType.POINT_ON_POINT:
            return self._merge_points(requirement, component, store)
        if kind in (
            RequirementType.SECTION_CIRCLE_DISTANCE,
            RequirementType.SECTION_ON_CIRCLE,
            RequirementType.SECTION_IN_CIRCLE,
        ):
            circle, section = self._lookup(
                requirement, self._circles, self._sections, "No such circle or section", True
            )
            if kind == RequirementType.SECTION_CIRCLE_DISTANCE:
                return SectionCircleDistance(section, circle, _parameter(requirement), store)
            if kind == RequirementType.SECTION_ON_CIRCLE:
                return SectionOnCircle(section, circle, store)
            raise NotConvergedError("section-in-circle requirements cannot be solved")
        if kind in (
            RequirementType.SECTION_SECTION_PARALLEL,
            RequirementType.SECTION_SECTION_PERPENDICULAR,
            RequirementType.SECTION_SECTION_ANGLE,
        ):
            first, second = self._lookup(requirement, self._sections, self._sections, "No such section", False)
            if kind == RequirementType.SECTION_SECTION_PARALLEL:
                return SectionSectionParallel(first, second, store)
            if kind == RequirementType.SECTION_SECTION_PERPENDICULAR:
                return SectionSectionPerpendicular(first, second, store)
            return SectionSectionAngle(first, second, _parameter(requirement), store)
        return None

    def _merge_points(
        self, requirement: RequirementData, component: list[int], store: VariableStore
    ) -> Optional[Constraint]:
        a, b = requirement.objects[0], requirement.objects[1]
        try:
            first = self._points[a]
            second = self._points[b]
        except KeyError:
            raise ValueError("No such point") from None
        if first is second:
            return None
        for vertex in component:
            section = self._sections.get(vertex)
            if section is None:
                continue
            if section.beg is first:
                section.beg = second
                break
            if section.end is first:
                section.end = second
                break
        self._points[a] = second
        return PointOnPoint(first, second, store)

    def requirement_info(self, requirement_id: int) -> RequirementData:
        if requirement_id not in self._requirements:
            raise ValueError("No such requirement!")
        return copy.deepcopy(self._requirements[requirement_id])

    def requirements(self) -> list[tuple[int, RequirementData]]:
        """All requirements in id order."""
        return [
            (requirement_id, copy.deepcopy(self._requirements[requirement_id]))
            for requirement_id in sorted(self._requirements)
        ]

    def delete_requirement(self, requirement_id: int) -> None:
        if requirement_id not in self._requirements:
            raise ValueError("No such requirement!")
        del self._requirements[requirement_id]

    # History

    def undo(self) -> None:
        """Take back the latest action: remove created elements or restore coordinates."""
        action = self.history.undo()
        if not action.params_before:
            for element_id in action.objects:
                if not self._discard_element(element_id):
                    break
            return
        for index, object_id in enumerate(action.objects):
            if self._is_element(object_id):
                self._set_coordinates(object_id, action.params_before[index])
            elif object_id in self._requirements:
                del self._requirements[object_id]
            else:
                break

    def redo(self) -> None:
        """Repeat the latest undone action: recreate elements or reapply coordinates."""
        action = self.history.redo()
        if not action.params_before:
            self._recreate(action)
            return
        for index, object_id in enumerate(action.objects):
            if not self._is_element(object_id):
                break
            self._set_coordinates(object_id, action.params_after[index])

    def _recreate(self, action: Action) -> None:
        objects, params = action.objects, action.params_after
        if len(objects) == 3:
            beg = Point(params[0][0], params[0][1])
            end = Point(params[1][0], params[1][1])
            self._points[objects[0]] = beg
            self._points[objects[1]] = end
            section = Section(beg, end)
            self._sections[objects[2]] = section
            self.bounds |= section.rect()
        elif len(objects) == 2:
            center = Point(params[0][0], params[0][1])
            self._points[objects[0]] = center
            circle = Circle(center, params[1][2])
            self._circles[objects[1]] = circle
            self.bounds |= circle.rect()
        elif len(objects) == 1:
            point = Point(params[0][0], params[0][1])
            self._points[objects[0]] = point
            self.bounds |= point.rect()

    # Drawing

    def _draw(self, painter: Any) -> None:
        painter.change_size(self.bounds)
        for point in _unique(self._points):
            painter.draw_point(point, False)
        for circle in _unique(self._circles):
            painter.draw_circle(circle, False)
        for section in _unique(self._sections):
            painter.draw_section(section, False)

    def paint(self) -> None:
        """Draw every element on the configured painter."""
        if self.painter is None:
            raise RuntimeError("no painter is set")
        self._draw(self.painter)

    def export_bmp(self, path: str | Path) -> None:
        """Write the sketch as a BMP image."""
        if self.painter is not None:
            self.paint()
        painter = BMPPainter()
        self._draw(painter)
        try:
            painter.save(path)
        except (OSError, ValueError) as exc:
            raise ValueError(f"Can not open file {path}") from exc

    # Persistence

    def _to_file(self) -> OurPFile:
        sketch = OurPFile()
        for table in (self._points, self._sections, self._circles):
            for element_id, shape in table.items():
                sketch.add_object(element_id, shape)
        for requirement_id, requirement in self._requirements.items():
            sketch.add_requirement(requirement_id, requirement)
        return sketch

    def to_string(self) -> str:
        return self._to_file().to_string()

    def save(self, path: str | Path) -> None:
        self._to_file().save(path)

    def load(self, path: str | Path) -> None:
        """Replace the sketch with the one stored at ``path``."""
        sketch = OurPFile()
        sketch.load(path)
        self._apply(sketch)

    def load_string(self, text: str) -> None:
        """Replace the sketch with the one described by ``text``."""
        sketch = OurPFile()
        sketch.load_string(text)
        self._apply(sketch)

    def _apply(self, sketch: OurPFile) -> None:
        self.clear()
        for record in sketch.objects:
            object_id, shape = record.to_pair()
            if isinstance(shape, Point):
                self._points[object_id] = shape
                self.graph.add_vertex(object_id)
            elif isinstance(shape, Circle):
                self._circles[object_id] = shape
                center_id = object_id - 1
                self.graph.add_edge(_in_object(center_id, object_id), center_id, object_id)
            elif isinstance(shape, Section):
                self._sections[object_id] = shape
                self.graph.add_vertex(object_id)
                link = RequirementData(RequirementType.POINT_IN_OBJECT, [object_id - 2, object_id - 1, object_id])
                self.graph.add_edge(link, object_id - 2, object_id)
                self.graph.add_edge(link, object_id - 1, object_id)
            else:
                continue
            self.bounds |= shape.rect()
            self._max_id = max(self._max_id, object_id)
        for record in sketch.requirements:
            requirement_id, requirement = record.to_pair()
            self._requirements[requirement_id] = requirement
            self.graph.add_edge(requirement, requirement.objects[0], requirement.objects[1])
            self._max_id = max(self._max_id, requirement_id)

    def clear(self) -> None:
        """Remove every element and requirement."""
        self._points.clear()
        self._sections.clear()
        self._circles.clear()
        self._requirements.clear()
        self.graph.clear()
        self.bounds = _INITIAL_BOUNDS
        self._max_id = 0