[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "barrelbrain"
version = "0.1.0"
description = "Neuroevolution of platform-climbing agents dodging rolling barrels"
requires-python = ">=3.10"
keywords = ["neuroevolution", "genetic-algorithm", "neural-network", "game", "simulation"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Education",
    "Intended Audience :: Science/Research",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Artificial Intelligence",
    "Topic :: Games/Entertainment :: Simulation",
]
dependencies = [
    "pygame",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
barrelbrain = "barrelbrain.app:main"

[tool.hatch.build.targets.wheel]
packages = ["barrelbrain"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
