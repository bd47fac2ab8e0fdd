[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "xpkit"
version = "0.1.0"
description = "Building blocks for resource controllers: conditions, field paths, events, object metadata helpers and a controller engine."
requires-python = ">=3.10"
dependencies = []
keywords = ["controller", "reconciler", "fieldpath", "conditions", "metadata", "events"]
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
    "Topic :: Software Development :: Libraries :: Application Frameworks",
]

[project.optional-dependencies]
test = ["pytest"]

[tool.hatch.build.targets.wheel]
packages = ["xpkit"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.mypy]
python_version = "3.10"
warn_unused_ignores = true
