# ultra_eval/workers/worker_main.py

from rq import Queue, SimpleWorker

from ultra_eval.core.logging import setup_logging
from ultra_eval.workers.queue import NOTIFICATIONS_QUEUE_NAME, get_redis_connection


QUEUE_NAMES = [NOTIFICATIONS_QUEUE_NAME]


def main():
    setup_logging()
    redis_conn = get_redis_connection()

    queues = [Queue(name, connection=redis_conn) for name in QUEUE_NAMES]

    worker = SimpleWorker(queues, connection=redis_conn)

    worker.work()


if __name__ == "__main__":
    main()
