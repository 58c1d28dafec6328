from contextlib import asynccontextmanager
from zoneinfo import ZoneInfo
from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from athletics.config import get_settings
from athletics.database import init_db, close_db
from athletics.routers import notifications_router, subscriptions_router, push_router
from athletics.services.notifier import build_notification_service
from athletics.services.scheduler import NotificationScheduler

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Startup: Create database tables
    await init_db()
    # Hourly game reminders (HH:15, muted during quiet hours)
    scheduler = NotificationScheduler(
        build_notification_service(),
        tz=ZoneInfo(settings.reference_timezone),
        run_minute=settings.notification_run_minute,
        quiet_hours_start=settings.quiet_hours_start,
        quiet_hours_end=settings.quiet_hours_end,
    )
    scheduler.start()
    app.state.notification_scheduler = scheduler
    yield
    # Shutdown: Stop background tasks
    scheduler.stop()
    await close_db()


app = FastAPI(
    title=settings.app_name,
    description="Lakers athletics schedule and game reminders",
    version="1.0.0",
    lifespan=lifespan,
)

# CORS middleware - production-aware
CORS_ORIGINS = (
    ["*"] if not settings.is_production() else [settings.app_url]
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Include routers
app.include_router(notifications_router)
app.include_router(subscriptions_router)
app.include_router(push_router)


@app.get("/")
async def root():
    return {
        "name": settings.app_name,
        "description": "Lakers athletics schedule and game reminders",
        "version": "1.0.0",
        "docs": "/docs",
    }


@app.get("/health")
async def health_check():
    return {"status": "healthy"}
