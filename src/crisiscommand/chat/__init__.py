"""Per-incident and per-service chat messages."""
