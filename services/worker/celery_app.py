"""
Celery application configuration for background tasks
"""
import asyncio

from celery import Celery
from celery.signals import worker_process_init, worker_process_shutdown
import structlog

from packages.common.config import get_settings
from packages.common.database import sessionmanager
from packages.common.logging import configure_logging

settings = get_settings()
configure_logging(settings.log_level)

logger = structlog.get_logger()

# Create Celery app
app = Celery(
    "thrifty_storefront_worker",
    broker=settings.celery_broker_url,
    backend=settings.celery_result_backend,
)

# Celery configuration
app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="Asia/Kolkata",
    enable_utc=True,

    # Task execution settings
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    task_time_limit=1800,  # 30 minutes hard limit (full catalog scan)
    task_soft_time_limit=1740,

    # Result backend settings
    result_expires=3600,  # Results expire after 1 hour
    result_extended=True,

    # Worker settings
    worker_prefetch_multiplier=1,
    worker_max_tasks_per_child=50,

    # Task routing
    task_routes={
        "services.worker.tasks.recategorize_products.*": {"queue": "catalog"},
    },
)

# Import tasks explicitly to register them
from services.worker.tasks import recategorize_products  # noqa: E402,F401


@worker_process_init.connect
def init_worker(**kwargs):
    """Initialize worker process"""
    logger.info("celery_worker_starting",
                concurrency=kwargs.get("concurrency", "unknown"))


@worker_process_shutdown.connect
def shutdown_worker(**kwargs):
    """Clean up worker process"""
    logger.info("celery_worker_shutting_down")

    try:
        asyncio.run(sessionmanager.close())
        logger.info("celery_database_closed")
    except Exception as e:
        logger.error("celery_database_close_failed", error=str(e))


if __name__ == "__main__":
    app.start()
