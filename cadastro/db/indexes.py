"""
cadastro/db/indexes.py

Purpose: Database index management

- Lookup indexes for registrations
- Idempotent: safe to run on every startup
"""

from pymongo import ASCENDING, DESCENDING

from cadastro.db.mongo import get_registrations_collection
from cadastro.core.logging import get_logger

logger = get_logger(__name__)


async def create_indexes():
    """
    Creates all necessary database indexes.
    """
    registrations = get_registrations_collection()

    logger.info("Creating database indexes...")

    await registrations.create_index([("email", ASCENDING)], name="email_idx")
    await registrations.create_index([("individual_id", ASCENDING)], name="individual_id_idx", sparse=True)
    await registrations.create_index([("business_id", ASCENDING)], name="business_id_idx", sparse=True)
    await registrations.create_index([("created_at", DESCENDING)], name="created_at_idx")

    logger.info("✅ Registration indexes ready")
