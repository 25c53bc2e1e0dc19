"""Staging ingestion.

This package reads raw CRM and ERP CSV extracts and persists them as
loosely typed bronze snapshots.
"""
