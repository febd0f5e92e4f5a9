"""Repository interfaces and implementations.

This package defines the abstract registry interface and its SQLite
implementation under :mod:`repositories.sqlite`.
"""
