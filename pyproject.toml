[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "alsloc"
version = "0.1.0"
description = "Building blocks for 2D LiDAR localization: poses, scans, distance maps, measurement models and MRF-based failure detection"
requires-python = ">=3.10"
keywords = ["localization", "lidar", "distance transform", "measurement model", "robotics", "failure detection"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering",
]
dependencies = [
    "numpy",
    "scipy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["alsloc"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
