[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "maelstrom"
version = "0.1.0"
description = "Typed vectors, hash tables and sparse matrices with explicit data types and storage kinds"
requires-python = ">=3.10"
keywords = ["vector", "sparse matrix", "csr", "csc", "coo", "hash table", "dtype"]
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
    "Topic :: Scientific/Engineering :: Mathematics",
]
dependencies = [
    "numpy",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["maelstrom"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
