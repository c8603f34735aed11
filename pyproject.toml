[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "pointbricks"
version = "0.6.0"
description = "Point cloud bricking, level-of-detail hierarchies and scene graph generation."
requires-python = ">=3.10"
dependencies = []
keywords = ["point cloud", "level of detail", "scene graph", "octree", "visualization"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Visualization",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
pointbricks = "pointbricks.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["pointbricks"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
