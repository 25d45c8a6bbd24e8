"""In-memory sample storage."""
