"""Ingestion, bucketing and aggregation services."""
