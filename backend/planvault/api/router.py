from fastapi import APIRouter

from planvault.api.endpoints import auth, events, reminders, stats

api_router = APIRouter()
api_router.include_router(auth.router, tags=["auth"])
api_router.include_router(events.router, prefix="/events", tags=["events"])
api_router.include_router(reminders.router, prefix="/reminders", tags=["reminders"])
api_router.include_router(stats.router, prefix="/stats", tags=["stats"])
