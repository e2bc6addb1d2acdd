[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "liftsim"
version = "0.1.0"
description = "Turn-based elevator scheduling simulator with an authorization-string puzzle and a reference strategy"
requires-python = ">=3.10"
dependencies = []
keywords = ["elevator", "simulation", "scheduling", "education", "threads"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Education",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Operating System :: OS Independent",
    "Topic :: Education",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
liftsim = "liftsim.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["liftsim"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
