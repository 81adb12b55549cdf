"""Core utilities shared across CrisisCommand modules."""

from crisiscommand.core.config import OrgConfig, get_cosmos_database, get_org_config
from crisiscommand.core.cosmos import DocumentStore
from crisiscommand.core.models import ApiModel, Document, Location, utcnow

__all__ = [
    "ApiModel",
    "Document",
    "DocumentStore",
    "Location",
    "OrgConfig",
    "get_cosmos_database",
    "get_org_config",
    "utcnow",
]
