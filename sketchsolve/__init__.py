"""Geometric constraint sketching: points, sections and circles, a least-squares solver, undo history, a text file format and BMP export."""

__version__ = "0.1.0"