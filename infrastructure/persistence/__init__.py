"""Persistence adapters for recipes."""
