"""Device API clients."""
