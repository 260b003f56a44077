"""Model, compare and report on the public API of cargo packages."""

__version__ = "0.1.0"