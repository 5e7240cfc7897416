[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "arduino-tui"
version = "0.1.1"
description = "A terminal user interface for browsing, installing and removing Arduino libraries through arduino-cli."
requires-python = ">=3.10"
dependencies = []
keywords = ["arduino", "tui", "cli", "embedded", "libraries", "curses"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console :: Curses",
    "Intended Audience :: Developers",
    "Operating System :: POSIX",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Embedded Systems",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
arduino-tui = "arduino_tui.ui:main"

[tool.hatch.build.targets.wheel]
packages = ["arduino_tui"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
