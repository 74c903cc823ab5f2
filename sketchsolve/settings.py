"""The application settings file: saved figures, requirements and preferences."""

from __future__ import annotations

from collections.abc import Iterator, Sequence
from pathlib import Path


class SettingsFile:
    """Reads and appends the sections of a settings file."""

    def __init__(self, path: str | Path) -> None:
        self.path = Path(path)

    def clear(self) -> None:
        self.path.write_text("")

    def _append_groups(self, title: str, groups: Sequence[Sequence[str]]) -> None:
        lines = [title, "{"]
        for group in groups:
            if not group:
                continue
            lines += [group[0], "{", *group[1:], "}"]
        lines.append("}")
        with self.path.open("a") as handle:
            handle.write("\n".join(lines) + "\n")

    def save_figures(self, figures: Sequence[Sequence[str]]) -> None:
        """Append figures; each is a name followed by its lines."""
        self._append_groups("Figure:", figures)

    def save_requirements(self, requirements: Sequence[Sequence[str]]) -> None:
        """Append requirements; each is a name followed by its lines."""
        self._append_groups("Requirements:", requirements)

    def save_settings(self, settings: Sequence[bool], name: str) -> None:
        """Append the grid flag (the first setting) and the name."""
        grid = "1" if settings[0] else "0"
        with self.path.open("a") as handle:
            handle.write(f"Settings:\n{{\nGrid: {grid}\nName: {name}\n}}\n")

    def _lines(self) -> Iterator[str]:
        return iter(self.path.read_text().splitlines())

    def _load_groups(self, title: str) -> list[list[str]]:
        groups: list[list[str]] = []
        lines = self._lines()
        inside = False
        for line in lines:
            if line == title:
                inside = True
                next(lines, None)
                continue
            if not inside:
                continue
            if line == "}":
                break
            if next(lines, None) != "{":
                continue
            group = [line]
            for entry in lines:
                if entry == "}":
                    break
                _, sep, value = entry.partition(": ")
                group.append(value if sep else entry)
            groups.append(group)
        return groups

    def load_figures(self) -> list[list[str]]:
        return self._load_groups("Figure:")

    def load_requirements(self) -> list[list[str]]:
        return self._load_groups("Requirements:")

    def load_settings(self) -> tuple[list[bool], str]:
        """Return the grid flags found and the last name, or an empty name."""
        settings: list[bool] = []
        name = ""
        inside = False
        lines = self._lines()
        for line in lines:
            if line == "Settings:":
                inside = True
                next(lines, None)
                continue
            if not inside:
                continue
            if line == "}":
                break
            if "Grid:" in line:
                settings.append(line[line.find(":") + 2:] == "1")
            if "Name:" in line:
                name = line[line.find(":") + 2:]
        return settings, name