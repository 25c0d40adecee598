"""Output layer: console factory and result formatters."""
