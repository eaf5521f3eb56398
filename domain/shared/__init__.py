"""Shared domain building blocks: errors and cross-cutting ports."""
