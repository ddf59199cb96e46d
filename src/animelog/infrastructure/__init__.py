"""Infrastructure layer: HTTP clients, throttling, persistence, observability."""
