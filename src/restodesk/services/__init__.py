"""Service layer: use-case orchestrators returning Result.

Services may import from domain and from the repository contracts.
They must never import from commands, output, or concrete adapters.
"""
