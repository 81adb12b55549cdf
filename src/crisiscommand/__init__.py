"""CrisisCommand: emergency incident reporting and dispatch."""

import logging

# Azure SDK emits HTTP-level logs at INFO; silence globally so all
# Cosmos DB stores are quiet.
logging.getLogger("azure").setLevel(logging.WARNING)
