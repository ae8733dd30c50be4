"""
Celery application for outbound mail.

The only workload is invitation email, so everything lands on one queue.
Run a worker with ``celery -A eventdesk.workers.celery_app worker -Q email``.
"""

from celery import Celery

from eventdesk.core.config import settings

EMAIL_QUEUE = "email"

celery_app = Celery(
    "eventdesk",
    broker=settings.CELERY_BROKER_URL,
    backend=settings.CELERY_RESULT_BACKEND,
    include=["eventdesk.workers.email_tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    # Delivery results are only inspected when debugging a bounced invite
    result_expires=24 * 3600,
    # A worker crash mid-send re-queues the invite instead of dropping it
    task_acks_late=True,
    task_reject_on_worker_lost=True,
    worker_prefetch_multiplier=1,
    broker_connection_retry_on_startup=True,
    task_default_queue=EMAIL_QUEUE,
    task_routes={"eventdesk.workers.email_tasks.*": {"queue": EMAIL_QUEUE}},
)
