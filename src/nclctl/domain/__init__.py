"""Domain layer: ids, enums, geometry, errors, and formula parsers.

This layer depends only on the standard library.
It must never import from services, infrastructure, commands, or config.
"""
