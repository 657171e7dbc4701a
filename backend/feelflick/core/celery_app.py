from celery import Celery
from celery.schedules import crontab

from feelflick.core.config import settings
import feelflick.utils.logger  # noqa: F401  configures the "feelflick" handler in workers

celery_app = Celery(
    "feelflick",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["feelflick.services.tasks"]
)

celery_app.conf.update(
    result_expires=3600,
    task_acks_late=True,
    worker_max_tasks_per_child=100,
    worker_prefetch_multiplier=1,    # batch jobs are long; one at a time per worker

    broker_connection_retry_on_startup=True,
    broker_pool_limit=10,

    # RedBeat scheduler configuration
    beat_scheduler='redbeat.schedulers:RedBeatScheduler',
    redbeat_redis_url=settings.redis_url,
    redbeat_key_prefix='feelflick:beat:',

    task_routes={
        'feelflick.services.tasks.calculate_content_scores': {'queue': 'scoring'},
        'feelflick.services.tasks.precompute_mood_scores': {'queue': 'scoring'},
        'feelflick.services.tasks.run_nightly_scoring': {'queue': 'scoring'},
    },

    beat_schedule={
        "nightly-scoring": {
            "task": "feelflick.services.tasks.run_nightly_scoring",
            "schedule": crontab(hour=3, minute=0),
        },
    },

    timezone=settings.timezone,
    enable_utc=True,
)
