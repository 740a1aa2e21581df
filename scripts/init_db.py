"""
Database initialization script for registrations

Run once (or after changing indexes) to create them ahead of the first start:
    python scripts/init_db.py
"""

import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

# Load environment variables before settings are built
load_dotenv()

from cadastro.core.logging import setup_logging, get_logger
from cadastro.db.indexes import create_indexes
from cadastro.db.mongo import connect_to_mongo, close_mongo_connection, get_registrations_collection

setup_logging()
logger = get_logger("scripts.init_db")


async def main():
    logger.info("=" * 60)
    logger.info("  Cadastro Database Setup")
    logger.info("=" * 60)

    await connect_to_mongo()
    try:
        await create_indexes()

        registrations = get_registrations_collection()
        indexes = await registrations.index_information()
        logger.info("🔍 registrations indexes:")
        for name in indexes:
            if name != "_id_":
                logger.info(f"    ✅ {name}")

        total = await registrations.count_documents({})
        logger.info(f"📊 Stored registrations: {total}")
        logger.info("✅ Database initialization complete!")
    finally:
        await close_mongo_connection()


if __name__ == "__main__":
    asyncio.run(main())
