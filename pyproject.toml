[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "staticmetrics"
version = "0.1.0"
description = "Prometheus-style metric values, labelled metric vectors, a collector registry and a parser for static metric definitions"
requires-python = ">=3.10"
dependencies = []
keywords = ["metrics", "prometheus", "monitoring", "counter", "gauge", "registry", "labels"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: System :: Monitoring",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["staticmetrics"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
