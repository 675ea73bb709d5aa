"""Application layer: DTOs, ports, services, and workflow handlers."""
