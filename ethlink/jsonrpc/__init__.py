"""JSON-RPC transports and the client with its eth, net and web3 namespaces."""

__all__ = ["transport", "client"]