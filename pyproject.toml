[build-system]
requires = ["setuptools>=61"]
build-backend = "setuptools.build_meta"

[project]
name = "hydrosim"
version = "0.1.0"
description = "Distributed hydrologic modelling components: precipitation grids, TRMM daily grids, Sacramento water balance, Snow-17 and parameter configuration sections"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "hydrology",
    "rainfall-runoff",
    "sacramento",
    "snow-17",
    "trmm",
    "precipitation",
    "raster",
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
    "Topic :: Scientific/Engineering :: Hydrology",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
trmmd-clip = "hydrosim.trmmd_clip:main"

[tool.setuptools.packages.find]
include = ["hydrosim*"]

[tool.pytest.ini_options]
addopts = "-ra"
