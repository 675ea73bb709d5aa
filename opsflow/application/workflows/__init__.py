"""Prebuilt business-process workflows: catalog and handlers."""
