import pytest

from sketchsolve.settings import SettingsFile


@pytest.fixture
def settings_file(tmp_path):
    return SettingsFile(tmp_path / "settings.txt")


def test_figures_round_trip(settings_file):
    figures = [["Triangle", "a", "b"], ["Square", "c"]]
    settings_file.save_figures(figures)
    assert settings_file.load_figures() == figures


def test_requirements_round_trip(settings_file):
    reqs = [["Dist", "1", "2", "10"]]
    settings_file.save_requirements(reqs)
    assert settings_file.load_requirements() == reqs


def test_empty_groups_are_skipped(settings_file):
    settings_file.save_figures([[], ["Only"]])
    assert settings_file.load_figures() == [["Only"]]


def test_prefix_before_colon_is_dropped(settings_file):
    settings_file.save_figures([["Fig", "x: 5", "plain"]])
    assert settings_file.load_figures() == [["Fig", "5", "plain"]]


def test_written_format(settings_file):
    settings_file.save_settings([True], "draft")
    assert settings_file.path.read_text() == "Settings:\n{\nGrid: 1\nName: draft\n}\n"


@pytest.mark.parametrize("grid", [True, False])
def test_settings_round_trip(settings_file, grid):
    settings_file.save_settings([grid], "draft")
    assert settings_file.load_settings() == ([grid], "draft")


def test_all_sections_in_one_file(settings_file):
    settings_file.save_figures([["F", "p"]])
    settings_file.save_requirements([["R", "q"]])
    settings_file.save_settings([False], "n")
    assert settings_file.load_figures() == [["F", "p"]]
    assert settings_file.load_requirements() == [["R", "q"]]
    assert settings_file.load_settings() == ([False], "n")


def test_clear_empties_file(settings_file):
    settings_file.save_figures([["F"]])
    settings_file.clear()
    assert settings_file.path.read_text() == ""
    assert settings_file.load_figures() == []


def test_missing_file_raises(tmp_path):
    missing = SettingsFile(tmp_path / "absent.txt")
    with pytest.raises(FileNotFoundError):
        missing.load_figures()
    with pytest.raises(FileNotFoundError):
        missing.load_settings()