"""Incident reports, their lifecycle, and responder assignments."""
