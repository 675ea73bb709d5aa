"""Domain layer: entities, enums, and exceptions.

Independent of persistence and transport.
"""
