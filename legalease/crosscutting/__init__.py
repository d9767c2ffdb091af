"""Cross-cutting concerns: configuration, logging, typed exceptions."""
