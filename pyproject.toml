[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "crateapi"
version = "0.1.0"
description = "Model the public API of a cargo package, compare two versions of it and report dependency changes"
requires-python = ">=3.11"
dependencies = []
keywords = ["cargo", "rustdoc", "api", "semver", "breaking-changes", "diff"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development :: Quality Assurance",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["crateapi"]

[tool.pytest.ini_options]
addopts = "-ra"
