[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "bchlight"
version = "0.1.0"
description = "Storage building blocks for a light Bitcoin Cash client: header stores, filter storage, checkpoints, block notifications and caches."
requires-python = ">=3.10"
dependencies = []
keywords = ["bitcoin-cash", "spv", "light-client", "block-headers", "compact-filters"]
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
    "Topic :: Office/Business :: Financial",
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["bchlight"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
