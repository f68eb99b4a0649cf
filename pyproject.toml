[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "mavrest"
version = "0.11.25"
description = "A simple REST and websocket API for MAVLink vehicles"
requires-python = ">=3.10"
dependencies = [
    "aiohttp",
]
keywords = ["mavlink", "rest", "websocket", "drone", "autopilot"]
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
    "Framework :: AsyncIO",
    "Framework :: aiohttp",
    "Topic :: Internet :: WWW/HTTP :: HTTP Servers",
]

[project.optional-dependencies]
test = [
    "pytest",
    "pytest-asyncio",
    "aiohttp",
]

[project.scripts]
mavrest = "mavrest.server:main"

[tool.hatch.build.targets.wheel]
packages = ["mavrest"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
ignore_missing_imports = true
