"""Curated load orchestration.

This package turns the current bronze snapshot into one atomically
published silver snapshot.
"""
