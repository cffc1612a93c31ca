"""Core ports, services and observability."""
