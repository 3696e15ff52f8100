"""
Persistence adapters.

These modules encapsulate how profiles, contacts and sync logs are stored.
Services depend on the repository instead of opening sessions themselves.
"""
