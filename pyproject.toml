[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "rlscore"
version = "0.1.0"
description = "Building blocks of a language server for Cargo projects and a command line that turns short commands into JSON-RPC messages"
requires-python = ">=3.11"
dependencies = []
keywords = ["language-server", "lsp", "json-rpc", "cargo", "tooling"]
classifiers = [
    "Development Status :: 4 - Beta",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Software Development",
    "Typing :: Typed",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
rlscore-cmd = "rlscore.cmd:main"

[tool.hatch.build.targets.wheel]
packages = ["rlscore"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py311"

[tool.mypy]
python_version = "3.11"
warn_unused_ignores = true
