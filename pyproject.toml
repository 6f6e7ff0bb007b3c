[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "siglab"
version = "0.1.0"
description = "Parametric insurance ledger: policies, oracle feeds, payouts and a reserve-backed treasury"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "insurance",
    "parametric-insurance",
    "oracle",
    "treasury",
    "payouts",
    "reserve-ratio",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Financial and Insurance Industry",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Office/Business :: Financial",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["siglab"]

[tool.hatch.build.targets.sdist]
include = ["siglab", "tests"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
