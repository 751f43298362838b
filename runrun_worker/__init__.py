"""
RunRun Stats Worker

This module provides Celery tasks for:
- Normalizing raw workouts into running records
- Weekly/monthly/yearly rollups, highlights and personal records
- Pace-colored route segments and per-kilometer splits
"""

# Delay Celery import to allow using the analysis package without celery configured
def get_celery_app():
    from .celery_app import app
    return app

# Only export get_celery_app function, not the app directly
__all__ = ['get_celery_app']
