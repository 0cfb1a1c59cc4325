# backend/mentorhub/tasks/celery_app.py
"""
Celery application configuration for MentorHub.

Redis is the broker. Only notification delivery runs on workers; results
are not stored.
"""

import os

from celery import Celery

from ..core.config import settings


def create_celery_app() -> Celery:
    """
    Create and configure the Celery application.

    Returns:
        Celery: Configured Celery application instance
    """
    # Priority: CELERY_BROKER_URL -> settings.redis_url
    broker_url = os.getenv("CELERY_BROKER_URL") or settings.redis_url

    app = Celery(
        "mentorhub",
        broker=broker_url,
        include=["mentorhub.tasks.notification_tasks"],
    )
    app.conf.update(
        task_serializer="json",
        accept_content=["json"],
        result_serializer="json",
        timezone="UTC",
        enable_utc=True,
        task_ignore_result=True,
        task_acks_late=True,
        task_reject_on_worker_lost=True,
        worker_prefetch_multiplier=4,
        worker_max_tasks_per_child=1000,
        broker_connection_retry_on_startup=True,
        task_default_queue="celery",
        task_routes={"notifications.*": {"queue": settings.notification_queue}},
    )
    return app


celery_app = create_celery_app()
