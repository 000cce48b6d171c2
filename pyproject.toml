[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "netchess"
version = "0.1.0"
description = "Two-player chess over a TCP connection, played in the terminal"
requires-python = ">=3.10"
dependencies = []
keywords = ["chess", "terminal", "network", "game", "two-player"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: End Users/Desktop",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment :: Board Games",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
netchess = "netchess.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["netchess"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
