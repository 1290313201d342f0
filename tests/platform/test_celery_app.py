from app.platform.celery_app import celery_app
from app.platform.config import settings


def test_tasks_are_routed_to_their_queues():
    routes = celery_app.conf.task_routes

    assert routes["app.features.accessibility.workers.tasks.run_accessibility_opportunities"] == {
        "queue": "a11y.opportunities"
    }
    assert routes["app.features.accessibility.workers.tasks.process_remediation_guidance"] == {
        "queue": settings.QUEUE_FROM_REMEDIATION_SERVICE
    }


def test_guidance_queue_is_consumed():
    queue_names = {queue.name for queue in celery_app.conf.task_queues}

    assert {"a11y.opportunities", settings.QUEUE_FROM_REMEDIATION_SERVICE} <= queue_names


def test_batches_are_acked_late():
    assert celery_app.conf.task_acks_late is True
    assert celery_app.conf.worker_prefetch_multiplier == 1
