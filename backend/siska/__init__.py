"""SISKA proxy: intent dispatch and aggregation over external data providers."""

__version__ = "1.0.0"
