"""
Bulk product re-categorization task

Re-runs keyword categorization over stored products and repoints their
primary/secondary categories. Typical triggers:
- keyword tables changed
- products imported without categories (only_uncategorized=True)

The async engine is bound to the event loop that created it, so each task
run initializes and disposes the session manager inside its own loop.
"""
import asyncio
from typing import Any, Dict

import structlog

from services.worker.celery_app import app
from packages.common.config import get_settings
from packages.common.database import sessionmanager
from packages.domain.categorization.categorization_service import categorization_service

logger = structlog.get_logger()


async def run_recategorization(only_uncategorized: bool = False) -> Dict[str, Any]:
    """Open a session, recategorize, commit, and dispose the engine."""
    settings = get_settings()
    await sessionmanager.init(settings.database_url)

    try:
        async with sessionmanager.session() as db:
            return await categorization_service.recategorize_products(
                db, only_uncategorized=only_uncategorized
            )
    finally:
        await sessionmanager.close()


@app.task(name="services.worker.tasks.recategorize_products.recategorize_products_task")
def recategorize_products_task(only_uncategorized: bool = False) -> Dict[str, Any]:
    """
    Celery entry point.

    Returns:
        Counts from CategorizationService.recategorize_products
    """
    logger.info("recategorize_task_started", only_uncategorized=only_uncategorized)

    summary = asyncio.run(run_recategorization(only_uncategorized))

    logger.info("recategorize_task_finished", **summary)
    return summary
