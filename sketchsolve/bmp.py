"""Monochrome raster images saved as BMP files, and a painter that draws shapes on them."""

from __future__ import annotations

import struct
from pathlib import Path

from .model import Circle, Point, Rectangle, Section

_HEADER_SIZE = 54
_PIXELS_PER_METRE = 2835


class Bitmap:
    """A black-and-white image; pixels are addressed by (row, column)."""

    def __init__(self, width: int = 0, height: int = 0) -> None:
        self.width = 0
        self.height = 0
        self._rows: list[bytearray] = []
        self.resize(width, height)

    def resize(self, width: int, height: int) -> None:
        """Replace the image with a white one of the given size."""
        if width < 0 or height < 0:
            raise ValueError("image size must not be negative")
        self.width = int(width)
        self.height = int(height)
        self._rows = [bytearray(b"\x01" * self.width) for _ in range(self.height)]

    def _inside(self, x: int, y: int) -> bool:
        return 0 <= x < self.height and 0 <= y < self.width

    def set_pixel(self, x: int, y: int, white: bool) -> None:
        """Colour the pixel at row ``x``, column ``y``; pixels outside are ignored."""
        if self._inside(x, y):
            self._rows[x][y] = 1 if white else 0

    def get_pixel(self, x: int, y: int) -> bool:
        """Return True if the pixel at row ``x``, column ``y`` is white."""
        if not self._inside(x, y):
            raise IndexError(f"pixel ({x}, {y}) outside {self.width}x{self.height} image")
        return bool(self._rows[x][y])

    def to_bytes(self) -> bytes:
        """Encode the image as an uncompressed 24-bit BMP."""
        row_size = (self.width * 3 + 3) // 4 * 4
        padding = b"\x00" * (row_size - self.width * 3)
        image_size = row_size * self.height
        header = struct.pack(
            "<2sIHHIIiiHHIIiiII",
            b"BM",
            _HEADER_SIZE + image_size,
            0,
            0,
            _HEADER_SIZE,
            40,
            self.width,
            self.height,
            1,
            24,
            0,
            image_size,
            _PIXELS_PER_METRE,
            _PIXELS_PER_METRE,
            0,
            0,
        )
        body = bytearray()
        for row in reversed(self._rows):
            for value in row:
                body += b"\xff\xff\xff" if value else b"\x00\x00\x00"
            body += padding
        return header + bytes(body)

    def save(self, path: str | Path) -> None:
        try:
            Path(path).write_bytes(self.to_bytes())
        except OSError as exc:
            raise ValueError(f"cannot write image to {path}") from exc


class BMPPainter:
    """Draws shapes onto a bitmap with the origin in the middle of the image."""

    def __init__(self, bitmap: Bitmap | None = None) -> None:
        self.bitmap = bitmap if bitmap is not None else Bitmap()
        self.width = self.bitmap.width
        self.height = self.bitmap.height

    def draw_point(self, point: Point, white: bool = False) -> None:
        self.bitmap.set_pixel(int(self.height // 2 - point.y), int(self.width // 2 + point.x), white)

    def draw_section(self, section: Section, white: bool = False) -> None:
        """Draw a section with Bresenham's line algorithm."""
        x0 = int(-section.beg.y + self.height // 2)
        y0 = int(section.beg.x + self.width // 2)
        x1 = int(-section.end.y + self.height // 2)
        y1 = int(section.end.x + self.width // 2)
        delta_x = abs(x1 - x0)
        dir_x = 1 if x0 < x1 else -1
        delta_y = -abs(y1 - y0)
        dir_y = 1 if y0 < y1 else -1
        err = delta_x + delta_y
        while True:
            self.bitmap.set_pixel(x0, y0, white)
            if x0 == x1 and y0 == y1:
                break
            e2 = 2 * err
            if e2 <= delta_x:
                err += delta_x
                y0 += dir_y
            if e2 >= delta_y:
                err += delta_y
                x0 += dir_x

    def draw_circle(self, circle: Circle, white: bool = False) -> None:
        """Draw a circle outline with the midpoint circle algorithm."""
        x = 0
        y = int(circle.radius)
        x0 = int(self.height // 2 - circle.center.y)
        y0 = int(circle.center.x + self.width // 2)
        delta = 1 - 2 * y
        while y >= x:
            for dx, dy in ((x, y), (x, -y), (-x, y), (-x, -y), (y, x), (y, -x), (-y, x), (-y, -x)):
                self.bitmap.set_pixel(x0 + dx, y0 + dy, white)
            error = (delta + y) * 2 - 1
            if delta < 0 and error <= 0:
                x += 1
                delta += 2 * x + 1
                continue
            if delta > 0 and error > 0:
                y -= 1
                delta -= 2 * y + 1
                continue
            x += 1
            y -= 1
            delta += 2 * (x - y)

    def change_size(self, rectangle: Rectangle) -> None:
        """Resize to twice the extent of ``rectangle`` in each direction."""
        new_width = int(abs(rectangle.x_2 - rectangle.x_1))
        new_height = int(abs(rectangle.y_2 - rectangle.y_1))
        self.bitmap.resize(new_width * 2, new_height * 2)
        self.width = new_width * 2
        self.height = new_height * 2

    def save(self, path: str | Path) -> None:
        self.bitmap.save(path)