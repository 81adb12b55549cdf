"""Audit trail of system actions."""
