"""User and service notifications."""
