"""
RunRun Worker Tasks Package
"""

from ..celery_app import app

# Import all tasks to ensure they're registered with Celery
from .route_tasks import analyze_route_samples, analyze_run_route
from .stats_tasks import normalize_workouts, summarize_running_history

__all__ = [
    "app",
    "analyze_route_samples",
    "analyze_run_route",
    "normalize_workouts",
    "summarize_running_history",
]
