"""Render recipe files."""
