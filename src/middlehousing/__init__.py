"""Middle housing permit classifier."""

__version__ = "0.1.0"
