[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "hmatkit"
version = "0.8.1"
description = "Building blocks for hierarchical matrices: geometric clustering, admissibility and low-rank compression."
requires-python = ">=3.10"
dependencies = ["numpy"]
keywords = ["hierarchical matrices", "low-rank", "clustering", "boundary element", "linear algebra", "svd"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Scientific/Engineering :: Mathematics",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["hmatkit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
