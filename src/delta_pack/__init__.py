"""Incremental deployment packages built from git commit ranges."""

__version__ = "0.1.0"
