[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tunedeck"
version = "0.1.0"
description = "Playlist handling, M3U/PLS parsing and spectrum band analysis for a compact audio player"
requires-python = ">=3.10"
dependencies = []
keywords = ["playlist", "m3u", "m3u8", "pls", "audio", "spectrum", "shuffle"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Multimedia :: Sound/Audio :: Players",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["tunedeck"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
