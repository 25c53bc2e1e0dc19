"""Layer storage and versioning.

This package persists immutable bronze and silver snapshots, swaps the
current version atomically, and exports versions to S3.
"""
