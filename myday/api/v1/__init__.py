from fastapi import APIRouter
from . import (
    auth,
    health,
    tasks,
    completions,
    events,
    journal,
    tags,
    routines,
    settings,
    insights,
    dashboard,
    stats,
    families,
    invitations,
    assignments,
    shared_tasks,
    notifications,
    storage,
    weather,
)

api_router = APIRouter(prefix="/api/v1")

api_router.include_router(auth.router, prefix="/auth", tags=["auth"])
api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(tasks.router, prefix="/tasks", tags=["tasks"])
api_router.include_router(completions.router, prefix="/completions", tags=["completions"])
api_router.include_router(events.router, prefix="/events", tags=["events"])
api_router.include_router(journal.router, prefix="/journal", tags=["journal"])
api_router.include_router(tags.router, prefix="/tags", tags=["tags"])
api_router.include_router(routines.router, prefix="/routines", tags=["routines"])
api_router.include_router(settings.router, prefix="/settings", tags=["settings"])
api_router.include_router(insights.router, prefix="/insights", tags=["insights"])
api_router.include_router(dashboard.router, prefix="/dashboard", tags=["dashboard"])
api_router.include_router(stats.router, prefix="/stats", tags=["stats"])

# Family collaboration
api_router.include_router(families.router, prefix="/families", tags=["families"])
api_router.include_router(invitations.router, prefix="/invitations", tags=["families"])
api_router.include_router(assignments.router, prefix="/assignments", tags=["families"])
api_router.include_router(shared_tasks.router, prefix="/shared-tasks", tags=["families"])
api_router.include_router(notifications.router, prefix="/notifications", tags=["notifications"])

api_router.include_router(storage.router, prefix="/storage", tags=["storage"])
api_router.include_router(weather.router, prefix="/weather", tags=["weather"])
