import pytest

from sketchsolve.model import Circle, Point, RequirementData, RequirementType, Section
from sketchsolve.ourp import OurPFile


def test_default_is_empty():
    assert len(OurPFile().objects) == 0


def test_add_object():
    f = OurPFile()
    f.add_object(1, Point(0, 0))
    assert len(f.objects) == 1


def test_to_string_sorted_content():
    f = OurPFile()
    beg, end = Point(3, 4), Point(5, 6)
    f.add_object(1, Point(1, 2))
    f.add_object(2, beg)
    f.add_object(3, end)
    f.add_requirement(5, RequirementData(RequirementType.POINT_ON_POINT, [2, 3]))
    f.add_object(4, Section(beg, end))
    expected = (
        "Elements: {\n{\nID 1\npoint 1.000000 2.000000\n}\n{\nID 2\npoint 3.000000 4.000000\n}\n"
        "{\nID 3\npoint 5.000000 6.000000\n}\n{\nID 4\nsection\n}\n}\n"
        "Requirements: {\n{\nID 5\naddreq 3 2 3 0\n}\n}\n"
    )
    assert f.to_string() == expected


def test_copy_is_independent():
    f = OurPFile()
    f.add_object(1, Point(1, 1))
    copied = OurPFile(f.objects, f.requirements)
    copied.add_object(2, Point(2, 2))
    assert len(copied.objects) == 2
    assert len(f.objects) == 1


def test_save_and_load(tmp_path):
    f = OurPFile()
    beg, end = Point(3, 4), Point(5, 6)
    f.add_object(1, Point(1, 2))
    f.add_object(3, end)
    f.add_object(2, beg)
    f.add_object(4, Section(beg, end))
    path = tmp_path / "test_file"
    f.save(path)

    loaded = OurPFile()
    loaded.load(path)
    assert len(loaded.objects) == 4
    first_id, first = loaded.objects[0].to_pair()
    assert first_id == 1
    assert (first.x, first.y) == (1, 2)
    last_id, section = loaded.objects[3].to_pair()
    assert last_id == 4
    assert (section.beg.x, section.beg.y) == (3, 4)
    assert (section.end.x, section.end.y) == (5, 6)


def test_loaded_section_shares_point_objects():
    f = OurPFile()
    beg, end = Point(3, 4), Point(5, 6)
    f.add_object(1, beg)
    f.add_object(2, end)
    f.add_object(3, Section(beg, end))
    loaded = OurPFile()
    loaded.load_string(f.to_string())
    assert loaded.objects[2].shape.beg is loaded.objects[0].shape


def test_circle_and_requirement_round_trip():
    f = OurPFile()
    center = Point(1, 2)
    f.add_object(1, center)
    f.add_object(2, Circle(center, 5))
    f.add_requirement(3, RequirementData(RequirementType.POINT_POINT_DISTANCE, [1, 2], [7.5]))
    loaded = OurPFile()
    loaded.load_string(f.to_string())
    circle = loaded.objects[1].shape
    assert (circle.center.x, circle.center.y, circle.radius) == (1, 2, 5)
    req_id, req = loaded.requirements[0].to_pair()
    assert req_id == 3
    assert req.req is RequirementType.POINT_POINT_DISTANCE
    assert req.objects == [1, 2]
    assert req.params == [7.5]
    assert loaded.to_string() == f.to_string()


def test_section_without_points_is_invalid():
    with pytest.raises(ValueError):
        OurPFile().load_string("Elements: {\n{\nID 1\nsection\n}\n}\n")


def test_load_missing_file_raises(tmp_path):
    with pytest.raises(OSError):
        OurPFile().load(tmp_path / "missing")