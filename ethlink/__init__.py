"""Ethereum toolkit: core types, ABI encoding, JSON-RPC client, contracts, ENS hashing and compilers."""

__version__ = "0.1.0"