[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "gorplay"
version = "0.0.1"
description = "Byte-level HTTP/1 payload handling, recorded-message framing, settings and a raw TCP client for HTTP traffic replay."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "http",
    "replay",
    "traffic",
    "payload",
    "parsing",
    "tcp",
]
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
    "Topic :: Internet :: WWW/HTTP",
    "Topic :: Software Development :: Testing :: Traffic Generation",
    "Topic :: System :: Networking :: Monitoring",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["gorplay"]

[tool.pytest.ini_options]
addopts = "-ra"
testpaths = ["tests"]
