"""Seed the emergency service directory on first startup."""

import logging

from crisiscommand.core.config import get_org_config
from crisiscommand.services.models import EmergencyService
from crisiscommand.services.store import ServiceStore

logger = logging.getLogger(__name__)


async def seed_emergency_services() -> int:
    """Create the configured emergency services if none exist yet.

    Returns:
        Number of services created (0 when already seeded)
    """
    seeds = get_org_config().emergency_services

    async with ServiceStore() as store:
        existing = await store.list_all()
        if existing:
            logger.debug("Emergency services already seeded (%d)", len(existing))
            return 0

        for seed in seeds:
            await store.create(
                EmergencyService(
                    name=seed.name,
                    code=seed.code.upper(),
                    service_numbers=seed.service_numbers,
                    description=seed.description or None,
                )
            )

    logger.info("Seeded %d emergency services", len(seeds))
    return len(seeds)
