[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "walkingdrum"
version = "0.1.0"
description = "Data layer for a seasonal multiplayer world: accounts, sessions, seasons, entities, components and moderation."
requires-python = ">=3.10"
dependencies = [
    "bcrypt",
]
keywords = [
    "game",
    "entity-component",
    "postgres",
    "sessions",
    "authentication",
    "moderation",
]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Games/Entertainment",
    "Topic :: Database",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["walkingdrum"]

[tool.hatch.build.targets.sdist]
include = [
    "walkingdrum",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
warn_redundant_casts = true
