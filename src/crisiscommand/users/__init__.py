"""Citizens, responders, and administrators."""
