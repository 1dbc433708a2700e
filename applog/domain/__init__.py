"""Domain layer: log record model and errors. No I/O happens here."""
