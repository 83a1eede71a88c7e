[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "ethlink"
version = "0.1.0"
description = "Ethereum toolkit: ABI encoding and decoding, JSON-RPC client, contract calls, ENS hashing and compiler wrappers"
requires-python = ">=3.10"
dependencies = [
    "pycryptodome",
    "websocket-client",
]
keywords = [
    "ethereum",
    "abi",
    "json-rpc",
    "web3",
    "ens",
    "solidity",
    "vyper",
    "smart-contracts",
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
    "Topic :: Software Development :: Libraries :: Python Modules",
]

[project.optional-dependencies]
test = [
    "pytest",
]

[tool.hatch.build.targets.wheel]
packages = ["ethlink"]

[tool.hatch.build.targets.sdist]
include = [
    "ethlink",
    "tests",
]

[tool.pytest.ini_options]
addopts = "-ra"
