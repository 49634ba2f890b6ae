[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ccsdsbus"
version = "0.1.0"
description = "CCSDS space packets, PUS secondary headers, a publish/subscribe packet router and a simulated power distribution unit"
requires-python = ">=3.10"
dependencies = []
keywords = ["ccsds", "pus", "telemetry", "telecommand", "space packet", "router", "crc16"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Science/Research",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Interface Engine/Protocol Translator",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["ccsdsbus"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
