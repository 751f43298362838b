"""
Celery Application Configuration
"""

from celery import Celery

from .config import WorkerSettings

settings = WorkerSettings.from_env()

# Initialize Celery
app = Celery('runrun', broker=settings.redis_url, backend=settings.redis_url)

# Configure Celery
app.conf.update(
    task_serializer='json',
    accept_content=['json'],
    result_serializer='json',
    timezone='UTC',
    enable_utc=True,
    task_track_started=True,
    task_time_limit=120,  # 2 minutes max per task
)

# Auto-discover tasks
app.autodiscover_tasks(['runrun_worker.tasks'])

__all__ = ['app', 'settings']
