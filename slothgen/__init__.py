"""Prometheus SLO rule generation through a plugin pipeline."""

__version__ = "0.1.0"