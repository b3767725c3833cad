[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "kratoscodegen"
version = "0.1.0"
description = "Scaffolding helpers for CRUD services: naming rules, table schemas, MySQL DDL, proto messages, services and error enums, and Go source fragments."
requires-python = ">=3.10"
dependencies = []
keywords = [
    "code-generation",
    "scaffolding",
    "protobuf",
    "proto3",
    "sql",
    "crud",
    "http-rule",
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
    "Topic :: Software Development :: Code Generators",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["kratoscodegen"]

[tool.hatch.build.targets.sdist]
include = ["kratoscodegen", "tests", "pyproject.toml"]

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
