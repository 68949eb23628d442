[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "platescan"
version = "0.1.0"
description = "Building blocks for licence plate recognition: fixed-point neural nets, mipmaps, polygon masks, a data-file reader and a plate tracker"
requires-python = ">=3.10"
dependencies = []
keywords = ["anpr", "licence plate", "neural network", "tracking", "image processing", "fixed point"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Image Recognition",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["platescan"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
