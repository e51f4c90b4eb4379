"""One-shot face verification of a reference image against a query image."""

__version__ = "0.1.0"
