"""Incident categories with guided prompt questions."""
