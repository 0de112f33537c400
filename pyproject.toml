[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "leafpack"
version = "0.1.0"
description = "Read, build and inspect PFS0/NSP packages and content meta (CNMT) records"
requires-python = ">=3.10"
dependencies = []
keywords = ["pfs0", "nsp", "cnmt", "archive", "package", "amiibo", "emuiibo"]
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
    "Topic :: System :: Archiving :: Packaging",
    "Topic :: File Formats",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["leafpack"]

[tool.pytest.ini_options]
addopts = "-ra"
