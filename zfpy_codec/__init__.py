"""Block coder for lossy compression of floating-point and integer data."""

__version__ = "0.5.0"