"""Remote control for a UDP-addressable smart fan."""

__version__ = "1.0.0"
