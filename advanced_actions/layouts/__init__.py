"""Popup panel placement."""
