"""Markup class names."""
