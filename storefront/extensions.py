import logging
import sqlite3

from flask_sqlalchemy import SQLAlchemy
from flask_migrate import Migrate
from sqlalchemy import event
from sqlalchemy.engine import Engine
import redis as _redis
from rq import Queue

logger = logging.getLogger(__name__)

db = SQLAlchemy()
migrate = Migrate()

# Set by init_redis from create_app; None means receiving runs inline
redis_client: _redis.Redis = None  # type: ignore
task_queue: Queue = None  # type: ignore


@event.listens_for(Engine, "connect")
def _enable_sqlite_foreign_keys(dbapi_connection, connection_record):
    """SQLite ignores foreign keys unless asked per connection."""
    if isinstance(dbapi_connection, sqlite3.Connection):
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()


class InlineQueue:
    """Stand-in for the RQ queue when Redis is not configured.

    ``enqueue`` returns None so callers know to run the job themselves.
    """

    def __init__(self, name):
        self.name = name

    def enqueue(self, func, *args, **kwargs):
        logger.info("No Redis for queue %s; %s will run inline", self.name, func.__name__)
        return None


def _disable_queue(queue_name):
    global redis_client, task_queue
    redis_client = None
    task_queue = InlineQueue(queue_name)


def init_redis(app):
    global redis_client, task_queue
    queue_name = app.config["STOCK_QUEUE_NAME"]
    redis_url = app.config.get("REDIS_URL", "")
    if not redis_url:
        logger.warning("REDIS_URL not set; stock orders are received inline")
        _disable_queue(queue_name)
        return

    try:
        client = _redis.from_url(redis_url, decode_responses=False)
        client.ping()
    except _redis.RedisError as e:
        logger.warning("Redis connection failed (%s); stock orders are received inline", e)
        _disable_queue(queue_name)
        return

    redis_client = client
    task_queue = Queue(queue_name, connection=client)
    logger.info("Stock receiving jobs go to queue %s", queue_name)
