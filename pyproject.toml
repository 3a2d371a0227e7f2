[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "btcscript-analyzer"
version = "0.1.0"
description = "Symbolic analyzer that lists the spending paths of a Bitcoin script"
requires-python = ">=3.10"
dependencies = [
    "pycryptodome",
]
keywords = ["bitcoin", "script", "analyzer", "segwit", "tapscript", "locktime"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Developers",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Security :: Cryptography",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
btcscript-analyzer = "btcscript_analyzer.cli:main"

[tool.hatch.build.targets.wheel]
packages = ["btcscript_analyzer"]

[tool.hatch.build.targets.sdist]
include = ["btcscript_analyzer", "tests"]

[tool.pytest.ini_options]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"

[tool.ruff.lint]
select = ["E", "F", "W", "I", "B", "UP"]

[tool.mypy]
python_version = "3.10"
