# tests/property/__init__.py
"""Property-based tests for blockflow.

These check invariants that must hold for every generated graph or
dataset: scheduling soundness, ordering and partitioning guarantees.
"""
