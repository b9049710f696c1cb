"""
Celery producers for the API

The API only knows task names; worker code (and its database setup) is
never imported into the web process.
"""
from celery import Celery

from packages.common.config import get_settings

RECATEGORIZE_PRODUCTS_TASK = "services.worker.tasks.recategorize_products.recategorize_products_task"

settings = get_settings()

celery_app = Celery("thrifty_storefront")
celery_app.conf.broker_url = settings.celery_broker_url
celery_app.conf.result_backend = settings.celery_result_backend
celery_app.conf.task_routes = {RECATEGORIZE_PRODUCTS_TASK: {"queue": "catalog"}}


def queue_product_recategorization(only_uncategorized: bool = False) -> str:
    """Queue a catalog-wide re-categorization; returns the Celery task id."""
    result = celery_app.send_task(RECATEGORIZE_PRODUCTS_TASK, args=[only_uncategorized])
    return result.id
