"""Repository contracts and their concrete adapters."""
