[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "tinkerbox"
version = "0.1.0"
description = "Small systems building blocks: lists, a buddy frame allocator, Sv39 paging, a RESP codec, an in-memory key-value database and lag-measuring tools"
requires-python = ">=3.10"
dependencies = []
keywords = [
    "linked-list",
    "deque",
    "buddy-allocator",
    "paging",
    "sv39",
    "resp",
    "redis-protocol",
    "pubsub",
    "latency",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Framework :: AsyncIO",
    "Topic :: Software Development :: Libraries",
    "Topic :: System :: Networking",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
]

[project.scripts]
tinkerbox-buddy = "tinkerbox.buddy:main"
lag-server = "tinkerbox.lag_server:main"
lag-client = "tinkerbox.lag_client:main"

[tool.hatch.build.targets.wheel]
packages = ["tinkerbox"]

[tool.hatch.build.targets.sdist]
include = ["tinkerbox", "tests", "README.md"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
