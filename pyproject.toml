[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ethnode"
version = "0.1.0"
description = "JSON-RPC client for Ethereum nodes (geth and parity) over HTTP or WebSocket, with typed block, receipt and trace records"
requires-python = ">=3.10"
keywords = ["ethereum", "json-rpc", "geth", "parity", "evm", "trace"]
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]
dependencies = [
    "requests",
    "websocket-client",
    "pycryptodome",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["ethnode"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"

[tool.ruff]
line-length = 100
target-version = "py310"
