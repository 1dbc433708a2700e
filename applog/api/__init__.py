"""API layer - inbound HTTP adapters."""
