"""ABI types, value encoding and decoding, event topics and contract descriptions."""

__all__ = ["abitype", "encoding", "topics", "spec"]