"""Chunk Relay: stream large HTTP files into object storage via multipart uploads."""

__version__ = "1.0.0"
