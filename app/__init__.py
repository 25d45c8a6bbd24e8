"""HTTP surface for the telemetry service."""
