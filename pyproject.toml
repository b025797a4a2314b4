[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "stockmill"
version = "0.1.0"
description = "A simulated stock market with limit and market order books, candle history and an HTTP API"
requires-python = ">=3.10"
keywords = ["stock market", "simulation", "order book", "trading", "candlestick"]
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
    "Framework :: Flask",
    "Topic :: Office/Business :: Financial :: Investment",
]
dependencies = [
    "flask",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[project.scripts]
stockmill = "stockmill.server:main"

[tool.hatch.build.targets.wheel]
packages = ["stockmill"]

[tool.pytest.ini_options]
addopts = "-ra"
