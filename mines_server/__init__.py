"""Provably-fair Mines game server."""

__version__ = "1.0.0"
