"""tapboard: tap-driven chess session manager."""

__version__ = "0.1.0"
