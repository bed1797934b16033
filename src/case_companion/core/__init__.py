"""Immutable data types shared across the package."""
