"""Application services: payload extraction, templates, formatting, domain operations."""
