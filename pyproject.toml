[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "sketchsolve"
version = "0.1.0"
description = "Geometric constraint sketching: points, sections and circles solved with Levenberg-Marquardt"
requires-python = ">=3.10"
dependencies = [
    "numpy",
]
keywords = ["geometry", "constraints", "cad", "sketch", "levenberg-marquardt", "bmp"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["sketchsolve"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
