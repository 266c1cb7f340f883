"""Notebook and kernel spec parsing."""
