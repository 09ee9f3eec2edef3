"""HTTP traffic replay building blocks: payload handling, message framing, settings and a TCP client."""

__version__ = "0.0.1"