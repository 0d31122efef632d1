"""Curation donation reconciliation service."""
