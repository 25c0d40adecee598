"""Domain layer: entities, input schemas, lifecycle tables, and rules.

This layer depends only on stdlib and pydantic.
It must never import from services, infrastructure, commands, or config.
"""
