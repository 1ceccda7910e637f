"""Adapters shipped with the core (in-memory only)."""
