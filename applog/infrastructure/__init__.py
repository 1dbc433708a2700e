"""Infrastructure: structlog integration, JSON encoding, HTTP client adapters."""
