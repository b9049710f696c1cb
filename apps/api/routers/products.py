"""
Products API Router
Catalog maintenance operations
"""
import structlog
from fastapi import APIRouter, Query, status
from pydantic import BaseModel

from apps.api.tasks import queue_product_recategorization

logger = structlog.get_logger()
router = APIRouter()


class RecategorizeResponse(BaseModel):
    task_id: str
    only_uncategorized: bool


@router.post("/recategorize", response_model=RecategorizeResponse, status_code=status.HTTP_202_ACCEPTED)
async def recategorize_products(
    only_uncategorized: bool = Query(False, description="Skip products that already have a category"),
):
    """
    Queue a background re-categorization of stored products

    Use after editing the keyword tables or to fix products imported
    without categories.
    """
    task_id = queue_product_recategorization(only_uncategorized)

    logger.info("recategorization_queued",
                task_id=task_id,
                only_uncategorized=only_uncategorized)

    return RecategorizeResponse(task_id=task_id, only_uncategorized=only_uncategorized)
