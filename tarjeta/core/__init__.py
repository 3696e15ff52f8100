"""
Core utilities shared across the Tarjeta API.

This package hosts:
- configuration helpers (env vars, CRM endpoints, timeouts)
- cross-cutting services such as structured logging and rate limit helpers.

Routers and services depend on these primitives instead of reading the
environment or configuring loggers themselves.
"""
