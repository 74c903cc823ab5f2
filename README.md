# sketchsolve

A small geometric constraint engine for 2D sketches. You place points,
sections (line segments) and circles, then attach requirements such as
"this point is 20 units from that section" or "these two sections are
parallel". When a requirement is added or an element is moved, every
requirement in the connected part of the sketch is re-solved with a
Levenberg-Marquardt least-squares solver that moves the coordinates in
place.

## Installation

```
pip install .
```

To run the tests:

```
pip install .[test]
pytest
```

## Elements and requirements

Elements are described with `sketchsolve.model.ElementData`
(`et` and `params`):

- `ElementType.POINT`: `x, y`
- `ElementType.SECTION`: `x1, y1, x2, y2`; adds two end points and the section
- `ElementType.CIRCLE`: `cx, cy, r`; adds a centre point and the circle

`Paint.add_element` returns the id of the new element (for a section or
circle, the id of the shape; its points take the ids just before it).

Requirements are described with `sketchsolve.model.RequirementData`
(`req`, `objects`, `params`) using `RequirementType`:

- `POINT_SECTION_DISTANCE` (distance in `params[0]`)
- `POINT_ON_SECTION`
- `POINT_POINT_DISTANCE` (distance in `params[0]`)
- `POINT_ON_POINT` (the two points are merged into one shared point)
- `SECTION_CIRCLE_DISTANCE` (distance in `params[0]`)
- `SECTION_ON_CIRCLE`
- `SECTION_SECTION_PARALLEL`
- `SECTION_SECTION_PERPENDICULAR`
- `SECTION_SECTION_ANGLE` (angle in degrees in `params[0]`)

`SECTION_IN_CIRCLE` exists in the enumeration but cannot be solved; adding
it raises `NotConvergedError`.

## Example

```python
from sketchsolve.model import ElementData, ElementType, RequirementData, RequirementType
from sketchsolve.paint import Paint

sketch = Paint()
a = sketch.add_element(ElementData(ElementType.POINT, [0.0, 0.0]))
b = sketch.add_element(ElementData(ElementType.POINT, [3.0, 1.0]))

req_id = sketch.add_requirement(
    RequirementData(RequirementType.POINT_POINT_DISTANCE, [a, b], [10.0])
)

print(sketch.element_info(a).params, sketch.element_info(b).params)
# the points now lie 10 apart

sketch.undo()   # coordinates restored, requirement removed
sketch.redo()   # coordinates reapplied
```

If the solver cannot satisfy a requirement, `add_requirement` undoes it and
raises `sketchsolve.constraints.NotConvergedError`. Referring to missing or
mistyped elements raises `ValueError` and the requirement is not kept.

Other operations on `Paint`: `find_element`, `move_element`,
`parallel_move`, `elements`, `requirements`, `requirement_info`,
`delete_requirement` and `clear`.

## Saving, loading and export

- `Paint.save(path)` / `Paint.load(path)` write and read the plain-text
  sketch format; `Paint.to_string()` / `Paint.load_string(text)` do the
  same in memory. The format is handled by `sketchsolve.ourp.OurPFile`,
  one record per element or requirement (`sketchsolve.records`).
- `Paint.export_bmp(path)` renders the sketch to a black-and-white 24-bit
  BMP image using `sketchsolve.bmp.BMPPainter` and `sketchsolve.bmp.Bitmap`.
- `Paint.paint()` draws onto the painter passed to `Paint(painter)`: any
  object with `change_size`, `draw_point`, `draw_section` and `draw_circle`.
- `sketchsolve.settings.SettingsFile` reads and appends a sectioned text
  file holding figure presets, requirement presets, a grid flag and a name.

## What the package does not do

There is no interactive drawing screen and no command-line program: sketches
are built and edited through the `Paint` class, and the only rendered output
is a BMP file.