import asyncio
import logging
from typing import Any, Dict, Optional

from kombu import Connection, Exchange, Queue

from app.platform.config import settings
from app.platform.exceptions import A11yConfigurationError

logger = logging.getLogger(__name__)


class KombuQueueClient:
    """
    Publishes JSON messages to a named queue on the Celery broker.

    kombu's producer is blocking, so every publish runs in a worker thread and
    opens its own connection from the pool; concurrent sends do not share a channel.
    """

    def __init__(self, broker_url: Optional[str] = None, retry: bool = True):
        self.broker_url = broker_url or settings.CELERY_BROKER_URL
        if not self.broker_url:
            raise A11yConfigurationError("CELERY_BROKER_URL is not configured")
        self.retry = retry
        self._connection = Connection(self.broker_url)
        self._pool = self._connection.Pool(limit=10)

    async def send_message(self, queue_name: str, message: Dict[str, Any]) -> None:
        await asyncio.to_thread(self._publish, queue_name, message)

    def _publish(self, queue_name: str, message: Dict[str, Any]) -> None:
        queue = Queue(queue_name, Exchange(queue_name, type="direct"), routing_key=queue_name)

        with self._pool.acquire(block=True) as conn:
            producer = conn.Producer(serializer="json")
            producer.publish(
                message,
                exchange=queue.exchange,
                routing_key=queue_name,
                declare=[queue],
                retry=self.retry,
                retry_policy={"max_retries": 3, "interval_start": 0, "interval_step": 0.5},
            )

        logger.debug(f"Published {message.get('type')} message to {queue_name}")

    def close(self) -> None:
        self._pool.force_close_all()
        self._connection.release()
