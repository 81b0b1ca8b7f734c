"""Build tooling for the AMP by Example site."""

__version__ = "1.0.0"
