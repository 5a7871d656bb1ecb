[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "polylp"
version = "0.1.0"
description = "Linear programming over polyhedra in exact rational or floating-point arithmetic: dual simplex, criss-cross, redundancy, implicit linearity and adjacency"
requires-python = ">=3.10"
keywords = [
    "linear programming",
    "polyhedra",
    "dual simplex",
    "criss-cross",
    "redundancy",
    "implicit linearity",
    "convex geometry",
]
classifiers = [
    "Development Status :: 4 - Beta",
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
dependencies = []

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["polylp"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
