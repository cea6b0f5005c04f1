"""Shared helpers used across gemload modules."""
