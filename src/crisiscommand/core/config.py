"""Configuration loading utilities."""

import json
import os
from dataclasses import dataclass, field
from pathlib import Path
from zoneinfo import ZoneInfo

from dotenv import load_dotenv


@dataclass
class ServiceSeed:
    """An emergency service created on first startup."""

    name: str
    code: str
    service_numbers: list[str]
    description: str = ""


@dataclass
class OrgConfig:
    """Organization configuration loaded from config/organization.json.

    All deployment-specific data lives here rather than in code, so
    standing up the app for another region requires only editing the
    JSON file.
    """

    company_name: str
    cosmos_database: str = ""
    timezone: str = "UTC"
    emergency_services: list[ServiceSeed] = field(default_factory=list)


def get_project_root() -> Path:
    """Get the project root directory."""
    current = Path(__file__).resolve()
    for parent in current.parents:
        if (parent / "pyproject.toml").exists():
            return parent
    raise RuntimeError("Could not find project root (no pyproject.toml found)")


def load_org_config() -> OrgConfig:
    """Load organization configuration from config file.

    Returns:
        OrgConfig with company name, database name, and seed services

    Raises:
        FileNotFoundError: If config/organization.json does not exist
    """
    project_root = get_project_root()
    config_path = project_root / "config" / "organization.json"

    if not config_path.exists():
        raise FileNotFoundError(f"Config file not found: {config_path}")

    with config_path.open() as f:
        config_data = json.load(f)

    return OrgConfig(
        company_name=config_data["company_name"],
        cosmos_database=config_data.get("cosmos_database", ""),
        timezone=config_data.get("timezone", "UTC"),
        emergency_services=[
            ServiceSeed(
                name=s["name"],
                code=s["code"],
                service_numbers=list(s.get("service_numbers", [])),
                description=s.get("description", ""),
            )
            for s in config_data.get("emergency_services", [])
        ],
    )


# Cached config instance
_org_config: OrgConfig | None = None


def get_org_config() -> OrgConfig:
    """Get cached organization config.

    Loads config once and caches it for subsequent calls.
    """
    global _org_config
    if _org_config is None:
        _org_config = load_org_config()
    return _org_config


def get_cosmos_database() -> str:
    """Get Cosmos DB database name.

    Reads from ``COSMOS_DATABASE`` env var first (for Container Apps),
    falls back to ``organization.json``.
    """
    return os.getenv("COSMOS_DATABASE") or get_org_config().cosmos_database


def get_timezone() -> ZoneInfo:
    """Get organization timezone as a ZoneInfo object."""
    return ZoneInfo(get_org_config().timezone)


def get_cors_origins() -> list[str]:
    """Get allowed CORS origins from ``CORS_ORIGINS`` (comma-separated)."""
    load_dotenv()
    raw = os.getenv("CORS_ORIGINS", "")
    return [origin.strip() for origin in raw.split(",") if origin.strip()]


def get_presence_ttl() -> int:
    """Seconds a connected user stays "online" without a ping.

    Raises:
        ValueError: If ``PRESENCE_TTL_SECONDS`` is not a positive integer
    """
    load_dotenv()
    raw = os.getenv("PRESENCE_TTL_SECONDS", "300")
    try:
        ttl = int(raw)
    except ValueError:
        raise ValueError(f"PRESENCE_TTL_SECONDS must be an integer, got {raw!r}") from None
    if ttl <= 0:
        raise ValueError(f"PRESENCE_TTL_SECONDS must be positive, got {ttl}")
    return ttl
