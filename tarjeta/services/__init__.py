"""
High-level use cases for the Tarjeta API.

Each service module orchestrates repositories/adapters to implement
business rules (render a vCard, store a submission, sync it to the CRM).

Routers (FastAPI endpoints) call these services instead of touching the
database or the CRM directly.
"""
