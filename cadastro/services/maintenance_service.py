"""
cadastro/services/maintenance_service.py

Purpose: Periodic background cleanup

- Deletes stored documents older than DOCUMENT_MAX_AGE_HOURS
- Drops idle sessions
- Runs once at startup, then every SWEEP_INTERVAL_MINUTES
"""

import asyncio
from typing import Dict

from cadastro.core.logging import get_logger
from cadastro.flow.context import DocumentStore
from cadastro.services.session_service import SessionStore

logger = get_logger(__name__)


async def run_maintenance_once(document_store: DocumentStore, sessions: SessionStore,
                               max_age_seconds: float) -> Dict[str, int]:
    documents = await document_store.sweep(max_age_seconds)
    purged = sessions.purge_expired()
    return {"documents_deleted": documents, "sessions_purged": purged}


async def maintenance_loop(document_store: DocumentStore, sessions: SessionStore,
                           max_age_seconds: float, interval_seconds: float) -> None:
    """
    Runs until cancelled. A failing pass is logged and retried on the next tick.
    """
    logger.info(f"🧹 Maintenance loop started (every {interval_seconds:.0f}s)")
    while True:
        try:
            await run_maintenance_once(document_store, sessions, max_age_seconds)
        except Exception as e:
            logger.error(f"Maintenance pass failed: {e}", exc_info=True)
        await asyncio.sleep(interval_seconds)
