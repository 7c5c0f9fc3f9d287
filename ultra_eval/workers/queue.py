# ultra_eval/workers/queue.py

from redis import Redis
from rq import Queue

from ultra_eval.core.config import settings

NOTIFICATIONS_QUEUE_NAME = "notifications"

_redis_conn: Redis | None = None


def get_redis_connection() -> Redis:
    global _redis_conn
    if _redis_conn is None:
        _redis_conn = Redis.from_url(settings.REDIS_URL)
    return _redis_conn


def enqueue_email_task(to: str, subject: str, html_body: str) -> str:
    """Put one grade email on the notifications queue; returns the RQ job id."""
    from ultra_eval.workers.tasks import send_email_task

    queue = Queue(NOTIFICATIONS_QUEUE_NAME, connection=get_redis_connection())
    job = queue.enqueue(send_email_task, to, subject, html_body)
    return job.id
