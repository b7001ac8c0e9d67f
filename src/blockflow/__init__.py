"""Blockflow: dependency-ordered execution of tabular data pipelines."""

__version__ = "0.1.0"
