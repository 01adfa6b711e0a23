"""Rendering and streaming plugins."""
