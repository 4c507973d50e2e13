[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "encviz"
version = "0.1.0"
description = "Render electronic navigational chart data to web map tiles"
requires-python = ">=3.10"
keywords = ["enc", "s-57", "nautical chart", "web mercator", "tiles", "wmts", "xyz", "geojson"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Environment :: Web Environment",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: GIS",
]
dependencies = [
    "shapely",
    "pillow",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
enc-tile-render = "encviz.tile_render:main"
enc-tile-server = "encviz.tile_server:main"

[tool.hatch.build.targets.wheel]
packages = ["encviz"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
