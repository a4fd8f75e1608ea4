"""Extraction, reconciliation and orchestration services."""
