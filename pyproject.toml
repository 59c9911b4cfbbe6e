[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "icekit"
version = "0.1.0"
description = "Partition transforms for columnar table data: identity, void, temporal, bucket and truncate"
requires-python = ">=3.11"
dependencies = []
keywords = ["partitioning", "transform", "murmur3", "bucket", "truncate", "table-format"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Database",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["icekit"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
