"""Application layer: ports and the services that build and emit log records."""
