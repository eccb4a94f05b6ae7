[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "runnerfleet"
version = "0.1.0"
description = "Reconciliation logic, scheduling and helpers for fleets of self-hosted CI runners"
requires-python = ">=3.10"
keywords = ["ci", "runners", "autoscaling", "reconciler", "schedule", "hashing"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: System Administrators",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Distributed Computing",
]
dependencies = [
    "python-dateutil",
    "requests",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["runnerfleet"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
