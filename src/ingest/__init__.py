"""Escalation ingestion pipeline.

This package reads raw producer records and runs the write handler
that normalizes, deduplicates, and persists or quarantines them.
"""
