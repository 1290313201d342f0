from celery import Celery
from kombu import Queue

from app.platform.config import settings


def create_celery_app() -> Celery:
    """
    Create and configure the Celery application.

    Queue Structure:
    - a11y.opportunities: audit batches (aggregate -> opportunity -> suggestions -> dispatch)
    - QUEUE_FROM_REMEDIATION_SERVICE: guidance replies coming back from the remediation service

    Batches for one site must not run concurrently (the store snapshot is read once
    per batch), so run the a11y.opportunities worker with concurrency 1 per site shard.
    """
    celery_app = Celery(
        "a11y_remediation",
        broker=settings.CELERY_BROKER_URL,
        backend=settings.CELERY_RESULT_BACKEND,
    )

    celery_app.conf.update(
        task_serializer=settings.CELERY_TASK_SERIALIZER,
        result_serializer=settings.CELERY_RESULT_SERIALIZER,
        accept_content=[settings.CELERY_ACCEPT_CONTENT],
        timezone="UTC",
        enable_utc=True,
        task_track_started=settings.CELERY_TASK_TRACK_STARTED,
        task_time_limit=settings.CELERY_TASK_TIME_LIMIT,

        result_expires=3600,

        task_routes={
            "app.features.accessibility.workers.tasks.run_accessibility_opportunities": {
                "queue": "a11y.opportunities"
            },
            "app.features.accessibility.workers.tasks.process_remediation_guidance": {
                "queue": settings.QUEUE_FROM_REMEDIATION_SERVICE
            },
        },

        task_queues=(
            Queue("default"),
            Queue("a11y.opportunities"),
            Queue(settings.QUEUE_FROM_REMEDIATION_SERVICE),
        ),

        task_default_queue="default",

        worker_prefetch_multiplier=1,  # Fair distribution

        # A batch that dies mid-flight is retried as a whole
        task_acks_late=True,
        task_reject_on_worker_lost=True,
    )

    celery_app.autodiscover_tasks(["app.features.accessibility.workers"])

    return celery_app


# Global Celery app instance
celery_app = create_celery_app()
